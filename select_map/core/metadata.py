"""Field metadata provider.

Reads the ordered field list of a type once and keeps it for the lifetime of
the provider. Supports Pydantic models, dataclasses and plain annotated
classes. Overrides are declared with ``Annotated`` markers::

    @dataclass
    class OrderModel:
        id: int
        buyer: Annotated[str | None, MapFrom("customer_name")] = None
        notes: Annotated[str | None, NotMapped()] = None

Dataclass fields may use ``field(metadata={"map_from": ..., "not_mapped": True})``
instead.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Protocol, get_origin, get_type_hints

from pydantic.fields import FieldInfo

from select_map.core.exceptions import MetadataError
from select_map.core.types import (
    element_type,
    is_collection,
    is_pydantic_model,
    is_structured,
    strip_annotated,
    unwrap_optional,
)

logger = logging.getLogger(__name__)

MAP_FROM_KEY = "map_from"
NOT_MAPPED_KEY = "not_mapped"


@dataclass(frozen=True)
class MapFrom:
    """Map the annotated field from an explicit source path."""

    path: str


@dataclass(frozen=True)
class NotMapped:
    """Exclude the annotated field from mapping."""


@dataclass(frozen=True)
class FieldDescriptor:
    """Metadata of a single field of a type."""

    name: str
    type: Any
    is_collection: bool = False
    element_type: Any = None
    override_path: str | None = None
    excluded: bool = False
    nullable: bool = False
    has_default: bool = False

    @classmethod
    def from_annotation(
        cls,
        name: str,
        annotation: Any,
        *,
        has_default: bool = False,
        metadata: Mapping[str, Any] | None = None,
    ) -> FieldDescriptor:
        """Build a descriptor from a (possibly Annotated/Optional) annotation."""
        metadata = metadata or {}
        tp, extras = strip_annotated(annotation)
        tp, nullable = unwrap_optional(tp)
        tp, inner_extras = strip_annotated(tp)

        override_path = metadata.get(MAP_FROM_KEY)
        excluded = bool(metadata.get(NOT_MAPPED_KEY, False))
        for extra in extras + inner_extras:
            if isinstance(extra, MapFrom):
                override_path = extra.path
            elif isinstance(extra, NotMapped) or extra is NotMapped:
                excluded = True

        collection = is_collection(tp)
        return cls(
            name=name,
            type=tp,
            is_collection=collection,
            element_type=element_type(tp) if collection else None,
            override_path=override_path,
            excluded=excluded,
            nullable=nullable,
            has_default=has_default,
        )


class MetadataProvider(Protocol):
    """Supplies the ordered field list of a type."""

    def list_fields(self, tp: Any) -> tuple[FieldDescriptor, ...]:
        """Return the fields of ``tp``; empty for types without fields."""
        ...


def _is_class_var(annotation: Any) -> bool:
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _pydantic_annotation(info: FieldInfo) -> Any:
    # Pydantic resolves the annotation and keeps unknown Annotated markers in metadata.
    if info.metadata:
        return Annotated[(info.annotation, *info.metadata)]
    return info.annotation


class FieldMetadataProvider:
    """Introspecting metadata provider with a per-type table.

    Detection order:
    1. Explicitly registered fields
    2. Pydantic BaseModel -> model_fields
    3. dataclass -> dataclasses.fields (init fields only)
    4. Plain class -> class annotations, else ``__init__`` parameters
    """

    def __init__(self) -> None:
        self._fields: dict[Any, tuple[FieldDescriptor, ...]] = {}

    def register(self, tp: type, fields: Iterable[FieldDescriptor]) -> None:
        """Declare the fields of ``tp`` explicitly instead of introspecting it."""
        self._fields[tp] = tuple(fields)

    def list_fields(self, tp: Any) -> tuple[FieldDescriptor, ...]:
        try:
            return self._fields[tp]
        except KeyError:
            pass
        fields = self._introspect(tp)
        self._fields[tp] = fields
        logger.debug("Read %d fields of %r", len(fields), tp)
        return fields

    def _introspect(self, tp: Any) -> tuple[FieldDescriptor, ...]:
        if not is_structured(tp):
            return ()

        if is_pydantic_model(tp):
            return tuple(
                FieldDescriptor.from_annotation(
                    name,
                    _pydantic_annotation(info),
                    has_default=not info.is_required(),
                )
                for name, info in tp.model_fields.items()
            )

        try:
            hints = get_type_hints(tp, include_extras=True)
        except (NameError, TypeError) as e:
            raise MetadataError(tp.__name__, str(e)) from e

        if dataclasses.is_dataclass(tp):
            return tuple(
                FieldDescriptor.from_annotation(
                    f.name,
                    hints.get(f.name, f.type),
                    has_default=(
                        f.default is not dataclasses.MISSING
                        or f.default_factory is not dataclasses.MISSING
                    ),
                    metadata=f.metadata,
                )
                for f in dataclasses.fields(tp)
                if f.init
            )

        fields = tuple(
            FieldDescriptor.from_annotation(name, annotation, has_default=hasattr(tp, name))
            for name, annotation in hints.items()
            if not name.startswith("_") and not _is_class_var(annotation)
        )
        if fields:
            return fields
        return self._introspect_init(tp)

    @staticmethod
    def _introspect_init(tp: type) -> tuple[FieldDescriptor, ...]:
        """Fall back to the annotated parameters of ``__init__``."""
        if tp.__init__ is object.__init__:
            return ()
        try:
            sig = inspect.signature(tp.__init__)
            hints = get_type_hints(tp.__init__, include_extras=True)
        except (NameError, TypeError, ValueError) as e:
            raise MetadataError(tp.__name__, str(e)) from e
        return tuple(
            FieldDescriptor.from_annotation(
                name,
                hints.get(name, Any),
                has_default=param.default is not inspect.Parameter.empty,
            )
            for name, param in sig.parameters.items()
            if name != "self"
            and param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
        )
