"""SelectMap - convention-based projection compiler."""

from __future__ import annotations

from select_map.adapters.compiled import ClosureCompiler
from select_map.adapters.protocol import MappingCompiler
from select_map.adapters.source import render
from select_map.core.config import MapperConfig
from select_map.core.exceptions import (
    AmbiguousPathError,
    ConstructionError,
    ConversionError,
    MappingError,
    MetadataError,
    PathError,
    SelectMapError,
    ShapeMismatchError,
    UnresolvedPathError,
    UnsupportedContainerError,
)
from select_map.core.metadata import (
    FieldDescriptor,
    FieldMetadataProvider,
    MapFrom,
    MetadataProvider,
    NotMapped,
)
from select_map.core.registry import CompiledMapping, MappingRegistry
from select_map.mapping.path import PathResolver
from select_map.mapping.projector import ProjectionMapper
from select_map.mapping.synthesizer import MappingSynthesizer

__all__ = [
    # Config
    "MapperConfig",
    # Metadata
    "FieldDescriptor",
    "FieldMetadataProvider",
    "MetadataProvider",
    "MapFrom",
    "NotMapped",
    # Synthesis
    "PathResolver",
    "MappingSynthesizer",
    # Registry
    "MappingRegistry",
    "CompiledMapping",
    "ProjectionMapper",
    # Adapters
    "MappingCompiler",
    "ClosureCompiler",
    "render",
    # Exceptions
    "SelectMapError",
    "MetadataError",
    "PathError",
    "UnresolvedPathError",
    "AmbiguousPathError",
    "MappingError",
    "ShapeMismatchError",
    "UnsupportedContainerError",
    "ConstructionError",
    "ConversionError",
]
