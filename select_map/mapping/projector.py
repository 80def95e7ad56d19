"""Typed projection mapper.

Binds a source type and a destination type to a MappingRegistry and exposes
the mapper protocol over the cached compiled mapping.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from select_map.core.registry import CompiledMapping, MappingRegistry

S = TypeVar("S")
D = TypeVar("D")


class ProjectionMapper(Generic[S, D]):
    """Maps ``source_type`` values to ``dest_type`` by naming convention.

    The mapping is built on first use and shared through the registry, so
    any number of ProjectionMappers for the same pair reuse one compiled
    mapping.

    Args:
        source_type: The class of the values to map.
        dest_type: The class to construct.
        registry: Registry owning the compiled mapping.
    """

    def __init__(
        self,
        source_type: type[S],
        dest_type: type[D],
        registry: MappingRegistry,
    ) -> None:
        self._source_type = source_type
        self._dest_type = dest_type
        self._registry = registry

    @property
    def mapping(self) -> CompiledMapping[S, D]:
        return self._registry.get_mapping(self._source_type, self._dest_type)

    def map_one(self, source: S) -> D:
        """Map a single value."""
        return self.mapping(source)

    def map_many(self, sources: Iterable[S]) -> list[D]:
        """Map all values via the compiled mapping."""
        return list(self.iter_many(sources))

    def iter_many(self, sources: Iterable[S]) -> Iterator[D]:
        """Lazily map values; the mapping itself is built immediately."""
        return self._registry.project(sources, self._dest_type, self._source_type)
