"""SelectMap exception hierarchy.

Path resolution and shape errors are raised while a mapping is built, so a
misconfigured mapping fails once, when the registry is populated. Runtime
failures raised by compiled mappings are wrapped in SelectMap exceptions too.
"""

from __future__ import annotations

from typing import Any


class SelectMapError(Exception):
    """Base exception for all SelectMap errors."""


# --- Metadata ---


class MetadataError(SelectMapError):
    """Raised when a type's field metadata cannot be introspected."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        super().__init__(f"Cannot read fields of '{type_name}': {detail}")


# --- Path resolution ---


class PathError(SelectMapError):
    """Base for convention path resolution errors."""

    def __init__(self, path: str, type_name: str, message: str) -> None:
        self.path = path
        self.type_name = type_name
        super().__init__(message)


class UnresolvedPathError(PathError):
    """Raised when a path matches no field by exact name or prefix."""

    def __init__(self, path: str, type_name: str) -> None:
        super().__init__(
            path,
            type_name,
            f"The path '{path}' did not match any field by exact name or prefix "
            f"on type '{type_name}'",
        )


class AmbiguousPathError(PathError):
    """Raised when a path matches more than one field at the same level."""

    def __init__(self, path: str, type_name: str, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(
            path,
            type_name,
            f"The path '{path}' is ambiguous on type '{type_name}': "
            f"candidates {candidates}",
        )


# --- Mapping ---


class MappingError(SelectMapError):
    """Base for mapping synthesis and execution errors."""


class ShapeMismatchError(MappingError):
    """Raised when a source value's shape cannot be mapped onto a destination field."""

    def __init__(self, field_name: str, source_type: str, dest_type: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"Cannot map field '{field_name}': source type {source_type} "
            f"does not fit destination type {dest_type}"
        )


class UnsupportedContainerError(MappingError):
    """Raised when a collection must be materialized into an unsupported container."""

    def __init__(self, field_name: str, container: str) -> None:
        self.field_name = field_name
        self.container = container
        super().__init__(
            f"Cannot materialize field '{field_name}' into container {container}: "
            f"only list-like and tuple containers are supported"
        )


class ConstructionError(MappingError):
    """Raised when a destination instance cannot be constructed from its bindings."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot construct {target_class}: {detail}")


class ConversionError(MappingError):
    """Raised when a scalar value cannot be converted to the destination type."""

    def __init__(self, target_type: str, value: Any) -> None:
        self.target_type = target_type
        self.value = value
        super().__init__(f"Cannot convert {value!r} to {target_type}")
