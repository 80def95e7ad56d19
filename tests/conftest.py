"""Shared test fixtures."""

from __future__ import annotations

import pytest

from select_map.adapters.compiled import ClosureCompiler
from select_map.core.config import MapperConfig
from select_map.core.metadata import FieldMetadataProvider
from select_map.core.registry import MappingRegistry
from select_map.mapping.path import PathResolver
from select_map.mapping.synthesizer import MappingSynthesizer


@pytest.fixture
def config() -> MapperConfig:
    """Default mapper configuration."""
    return MapperConfig()


@pytest.fixture
def provider() -> FieldMetadataProvider:
    """Fresh metadata provider."""
    return FieldMetadataProvider()


@pytest.fixture
def resolver(provider: FieldMetadataProvider, config: MapperConfig) -> PathResolver:
    return PathResolver(provider, config)


@pytest.fixture
def synthesizer(resolver: PathResolver, config: MapperConfig) -> MappingSynthesizer:
    return MappingSynthesizer(resolver, config)


@pytest.fixture
def registry(synthesizer: MappingSynthesizer) -> MappingRegistry:
    return MappingRegistry(synthesizer=synthesizer)


@pytest.fixture
def compiler() -> ClosureCompiler:
    return ClosureCompiler()
