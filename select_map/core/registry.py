"""Mapping registry - builds and caches compiled mappings per type pair.

Each (source type, destination type) pair is synthesized and compiled once,
on first use, and reused for the lifetime of the registry. Types are assumed
static, so entries are never invalidated.

Usage:
    registry = MappingRegistry()
    summary = registry.map(order, OrderSummary)
    summaries = list(registry.project(orders, OrderSummary))
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from select_map.adapters.compiled import ClosureCompiler
from select_map.adapters.protocol import MappingCompiler
from select_map.adapters.source import render
from select_map.core.config import MapperConfig
from select_map.core.metadata import FieldMetadataProvider, MetadataProvider
from select_map.core.types import type_name
from select_map.mapping.ast import Lambda
from select_map.mapping.path import PathResolver
from select_map.mapping.synthesizer import MappingSynthesizer

logger = logging.getLogger(__name__)

S = TypeVar("S")
D = TypeVar("D")

_EMPTY = object()


@dataclass(frozen=True, eq=False)
class CompiledMapping(Generic[S, D]):
    """A synthesized mapping together with its compiled function."""

    source_type: type[S]
    dest_type: type[D]
    expression: Lambda
    function: Callable[[S], D]

    def __call__(self, source: S) -> D:
        return self.function(source)

    @property
    def source(self) -> str:
        """The mapping rendered as Python lambda text."""
        return render(self.expression)


class MappingRegistry:
    """Builds and caches one compiled mapping per type pair.

    Construct one registry at startup and pass it to every call site.
    Concurrent first use of a pair synthesizes it once, under a lock.

    Args:
        config: Mapper configuration.
        provider: Field metadata provider, used when no synthesizer is given.
        synthesizer: Mapping synthesizer. Defaults to one built from
            ``provider`` and ``config``.
        compiler: Compiler turning mapping ASTs into callables.
    """

    def __init__(
        self,
        config: MapperConfig | None = None,
        *,
        provider: MetadataProvider | None = None,
        synthesizer: MappingSynthesizer | None = None,
        compiler: MappingCompiler | None = None,
    ) -> None:
        self._config = config or MapperConfig()
        if synthesizer is None:
            resolver = PathResolver(provider or FieldMetadataProvider(), self._config)
            synthesizer = MappingSynthesizer(resolver, self._config)
        self._synthesizer = synthesizer
        self._compiler = compiler or ClosureCompiler()
        self._mappings: dict[tuple[Any, Any], CompiledMapping[Any, Any]] = {}
        self._lock = threading.Lock()

    def get_mapping(self, source_type: type[S], dest_type: type[D]) -> CompiledMapping[S, D]:
        """Return the compiled mapping for a type pair, building it on first use.

        Raises:
            UnresolvedPathError: If a destination field's path matches nothing.
            AmbiguousPathError: If a destination field's path is ambiguous.
            MappingError: If a field's shape cannot be mapped.
        """
        key = (source_type, dest_type)
        mapping = self._mappings.get(key)
        if mapping is not None:
            return mapping

        with self._lock:
            mapping = self._mappings.get(key)
            if mapping is None:
                mapping = self._build(source_type, dest_type)
                self._mappings[key] = mapping
        return mapping

    def _build(self, source_type: type[S], dest_type: type[D]) -> CompiledMapping[S, D]:
        expression = self._synthesizer.build_lambda(source_type, dest_type)
        function = self._compiler.compile(expression)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Built mapping %s -> %s: %s",
                type_name(source_type),
                type_name(dest_type),
                render(expression),
            )
        return CompiledMapping(
            source_type=source_type,
            dest_type=dest_type,
            expression=expression,
            function=function,
        )

    def map(self, source: Any, dest_type: type[D]) -> D:
        """Map a single value, using its runtime type as the source type."""
        return self.get_mapping(type(source), dest_type)(source)

    def project(
        self,
        sources: Iterable[S],
        dest_type: type[D],
        source_type: type[S] | None = None,
    ) -> Iterator[D]:
        """Lazily map every element of ``sources`` to ``dest_type``.

        The mapping is built before the first element is pulled, so
        configuration errors surface here rather than during iteration.
        When ``source_type`` is omitted it is taken from the first element.
        """
        if source_type is None:
            return self.project_as(sources, dest_type)
        mapping = self.get_mapping(source_type, dest_type)
        return map(mapping, sources)

    def project_as(self, sources: Iterable[Any], dest_type: type[D]) -> Iterator[D]:
        """Lazily map ``sources`` using the runtime type of the first element."""
        iterator = iter(sources)
        first = next(iterator, _EMPTY)
        if first is _EMPTY:
            return iter(())
        mapping = self.get_mapping(type(first), dest_type)
        return map(mapping, itertools.chain((first,), iterator))

    def has(self, source_type: type, dest_type: type) -> bool:
        """Check if a mapping for the type pair has been built."""
        return (source_type, dest_type) in self._mappings

    @property
    def pairs(self) -> list[tuple[Any, Any]]:
        """Type pairs with a built mapping, in build order."""
        return list(self._mappings.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._mappings

    def __len__(self) -> int:
        """Number of built mappings."""
        return len(self._mappings)
