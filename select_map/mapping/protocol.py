"""Mapper protocol.

All mappers implement this interface: map_one for a single source value,
map_many for a batch.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T", covariant=True)


@runtime_checkable
class Mapper(Protocol[T]):
    """Base mapper protocol."""

    def map_one(self, source: Any) -> T:
        """Map a single source value to a target object."""
        ...

    def map_many(self, sources: Iterable[Any]) -> list[T]:
        """Map multiple source values to a list of target objects."""
        ...
