"""Mapping synthesis.

Walks the fields of a destination type, resolves each against a source
expression and emits a binding according to the shape of the resolved value:

- collections are projected element-wise and materialized into the
  destination's container kind,
- objects are bound directly when compatible, otherwise mapped recursively
  behind a null guard,
- scalars are bound directly, converted when the field type differs.

Recursion stops at ``MapperConfig.max_depth``; a field whose mapping would go
deeper is left out of its binding set rather than failing the whole build.
Excluded and cut-off fields that are nullable but have no default are bound
to ``None`` instead, so required constructor arguments are always supplied.
"""

from __future__ import annotations

import logging
from typing import Any

from select_map.core.config import MapperConfig
from select_map.core.exceptions import (
    MappingError,
    ShapeMismatchError,
    UnsupportedContainerError,
)
from select_map.core.metadata import FieldDescriptor, MetadataProvider
from select_map.core.types import (
    container_kind,
    element_type,
    is_assignable,
    is_atomic,
    is_collection,
    is_plain_class,
    is_structured,
    iterable_of,
    type_name,
    unwrap_optional,
)
from select_map.mapping.ast import (
    Binding,
    CollectionBinding,
    Constant,
    Construct,
    Convert,
    Expr,
    GuardedObjectBinding,
    Lambda,
    NullGuard,
    ObjectBinding,
    Parameter,
    ProjectedCollectionBinding,
    ScalarBinding,
)
from select_map.mapping.path import PathResolver

logger = logging.getLogger(__name__)

SOURCE_PARAMETER = "src"
ELEMENT_PARAMETER = "elem"


class MappingSynthesizer:
    """Builds mapping ASTs from destination field metadata.

    Args:
        resolver: Path resolver; its metadata provider is used for
            destination fields too.
        config: Mapper configuration (depth bound, scalar coercion).
    """

    def __init__(
        self,
        resolver: PathResolver | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self._config = config or MapperConfig()
        self._resolver = resolver or PathResolver(config=self._config)

    @property
    def provider(self) -> MetadataProvider:
        return self._resolver.provider

    def build_lambda(self, source_type: Any, dest_type: Any) -> Lambda:
        """Build the root mapping function from ``source_type`` to ``dest_type``."""
        parameter = Parameter(name=SOURCE_PARAMETER, type=source_type)
        body = self.build(parameter, dest_type)
        if body is None:
            raise MappingError(
                f"Mapping {type_name(source_type)} -> {type_name(dest_type)} "
                f"exceeds max_depth={self._config.max_depth}"
            )
        return Lambda(parameter=parameter, body=body)

    def build(self, source: Expr, dest_type: Any, depth: int = 0) -> Construct | None:
        """Build the binding set constructing ``dest_type`` from ``source``.

        Returns None when ``depth`` exceeds the configured bound.

        Raises:
            UnresolvedPathError: If a field's path matches nothing.
            AmbiguousPathError: If a field's path matches several fields.
            ShapeMismatchError: If ``dest_type`` has no mappable fields.
        """
        if depth > self._config.max_depth:
            return None
        if not is_structured(dest_type):
            raise ShapeMismatchError("<root>", type_name(source.type), type_name(dest_type))

        bindings: list[Binding] = []
        for field in self.provider.list_fields(dest_type):
            if field.excluded:
                binding = self._bind_missing(field)
            else:
                binding = self._bind_field(field, source, depth)
                if binding is None:
                    logger.debug(
                        "Omitting %s.%s: max_depth=%d reached at depth %d",
                        type_name(dest_type),
                        field.name,
                        self._config.max_depth,
                        depth,
                    )
                    binding = self._bind_missing(field)
            if binding is not None:
                bindings.append(binding)

        return Construct(type=dest_type, bindings=tuple(bindings))

    def _bind_field(self, field: FieldDescriptor, source: Expr, depth: int) -> Binding | None:
        selector = self._resolver.select(source, field.override_path or field.name)
        if is_collection(selector.type):
            return self._bind_collection(field, selector, depth)
        if is_structured(selector.type):
            return self._bind_object(field, selector, depth)
        return self._bind_scalar(field, selector)

    @staticmethod
    def _bind_missing(field: FieldDescriptor) -> Binding | None:
        # A required nullable field still has to be passed to the constructor.
        if field.nullable and not field.has_default:
            return ScalarBinding(field=field.name, value=Constant(value=None, type=field.type))
        return None

    def _bind_collection(
        self,
        field: FieldDescriptor,
        selector: Expr,
        depth: int,
    ) -> Binding | None:
        if not field.is_collection and not is_assignable(selector.type, field.type):
            raise ShapeMismatchError(field.name, type_name(selector.type), type_name(field.type))

        source_element, source_nullable = unwrap_optional(element_type(selector.type))
        dest_element, dest_nullable = (
            unwrap_optional(field.element_type) if field.is_collection else (Any, False)
        )
        parameter = Parameter(name=ELEMENT_PARAMETER, type=source_element)

        element: Expr | None = None
        if source_element != dest_element and Any not in (source_element, dest_element):
            if is_structured(source_element) and is_structured(dest_element):
                # Distinct element classes are remapped even when compatible.
                mapping = self.build(parameter, dest_element, depth + 1)
                if mapping is None:
                    return None
                element = mapping
                if source_nullable or dest_nullable:
                    element = NullGuard(operand=parameter, body=mapping)
            elif not is_assignable(source_element, dest_element):
                if not (is_atomic(source_element) and is_atomic(dest_element)):
                    raise ShapeMismatchError(
                        field.name,
                        type_name(selector.type),
                        type_name(field.type),
                    )
                if self._config.coerce_scalars and is_plain_class(dest_element):
                    element = Convert(operand=parameter, type=dest_element)

        projected_type = selector.type if element is None else iterable_of(element.type)
        container = None
        if not is_assignable(projected_type, field.type):
            container = container_kind(field.type)
            if container is None:
                raise UnsupportedContainerError(field.name, type_name(field.type))

        if element is None:
            return CollectionBinding(field=field.name, value=selector, container=container)
        return ProjectedCollectionBinding(
            field=field.name,
            source=selector,
            parameter=parameter,
            element=element,
            container=container,
        )

    def _bind_object(
        self,
        field: FieldDescriptor,
        selector: Expr,
        depth: int,
    ) -> Binding | None:
        if is_assignable(selector.type, field.type):
            return ObjectBinding(field=field.name, value=selector)
        if not is_structured(field.type):
            raise ShapeMismatchError(field.name, type_name(selector.type), type_name(field.type))

        mapping = self.build(selector, field.type, depth + 1)
        if mapping is None:
            return None
        guard = NullGuard(operand=selector, body=mapping)
        return GuardedObjectBinding(field=field.name, value=guard)

    def _bind_scalar(self, field: FieldDescriptor, selector: Expr) -> Binding:
        if (
            self._config.coerce_scalars
            and is_atomic(selector.type)
            and is_atomic(field.type)
            and is_plain_class(field.type)
            and not is_assignable(selector.type, field.type)
        ):
            return ScalarBinding(field=field.name, value=Convert(operand=selector, type=field.type))
        return ScalarBinding(field=field.name, value=selector)
