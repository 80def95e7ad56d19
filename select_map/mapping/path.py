"""Convention path resolution.

Resolves a destination field name (or an explicit ``MapFrom`` path) against
the fields of a source type, following naming conventions:

    "name"            -> src.name
    "customer_name"   -> src.customer.name        (flattening)
    "lines_sku"       -> [item.sku for item in src.lines]

Matching ignores case and separators. An exact field name always wins over
a prefix match; several prefix candidates at one level are an error, never
resolved by picking the longest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from select_map.core.config import MapperConfig
from select_map.core.exceptions import AmbiguousPathError, UnresolvedPathError
from select_map.core.metadata import FieldDescriptor, FieldMetadataProvider, MetadataProvider
from select_map.core.types import type_name, unwrap_optional
from select_map.mapping.ast import Expr, FieldAccess, Parameter, Projection

logger = logging.getLogger(__name__)

ELEMENT_PARAMETER = "item"


@dataclass(frozen=True)
class PathStep:
    """One traversed field. ``nested`` is set when the step projects a collection."""

    field: FieldDescriptor
    nested: ResolvedPath | None = None

    @property
    def is_projection(self) -> bool:
        return self.nested is not None


@dataclass(frozen=True)
class ResolvedPath:
    """The expression a path denotes, with the fields traversed to reach it."""

    expression: Expr
    steps: tuple[PathStep, ...]

    @property
    def consumed(self) -> str:
        """Concatenated names of every traversed field, in order."""
        parts: list[str] = []
        for step in self.steps:
            parts.append(step.field.name)
            if step.nested is not None:
                parts.append(step.nested.consumed)
        return "".join(parts)


class PathResolver:
    """Resolves convention paths into field access and projection expressions.

    Args:
        provider: Source of field metadata. Defaults to a fresh
            FieldMetadataProvider.
        config: Mapper configuration (path separators).
    """

    def __init__(
        self,
        provider: MetadataProvider | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self._provider = provider or FieldMetadataProvider()
        self._config = config or MapperConfig()

    @property
    def provider(self) -> MetadataProvider:
        return self._provider

    def select(self, root: Expr, path: str) -> Expr:
        """Resolve ``path`` from ``root`` and return only the expression."""
        return self.resolve(root, path).expression

    def resolve(self, root: Expr, path: str, source_type: Any = None) -> ResolvedPath:
        """Resolve ``path`` against the fields of ``source_type``.

        Args:
            root: Expression the resolved chain starts from.
            path: Convention or override path.
            source_type: Type whose fields are matched. Defaults to ``root.type``.

        Raises:
            UnresolvedPathError: If no field matches by exact name or prefix.
            AmbiguousPathError: If several fields match at the same level.
        """
        if source_type is None:
            source_type = root.type
        field, remainder = self._match(path.strip().lstrip(self._config.separators), source_type)

        if field.is_collection:
            expression, nested = self._collection_step(root, field, remainder)
            return ResolvedPath(expression, (PathStep(field, nested),))

        access = FieldAccess(target=root, field=field.name, type=field.type)
        if remainder:
            rest = self.resolve(access, remainder)
            return ResolvedPath(rest.expression, (PathStep(field), *rest.steps))
        return ResolvedPath(access, (PathStep(field),))

    def build_collection_step(self, root: Expr, field: FieldDescriptor, remainder: str) -> Expr:
        """Access a collection field, projecting ``remainder`` over its elements."""
        expression, _ = self._collection_step(root, field, remainder)
        return expression

    def _collection_step(
        self,
        root: Expr,
        field: FieldDescriptor,
        remainder: str,
    ) -> tuple[Expr, ResolvedPath | None]:
        access = FieldAccess(target=root, field=field.name, type=field.type)
        if not remainder.strip():
            return access, None

        # Only a single declared element type is supported.
        element, _ = unwrap_optional(field.element_type)
        parameter = Parameter(name=ELEMENT_PARAMETER, type=element)
        nested = self.resolve(parameter, remainder)
        return Projection(source=access, parameter=parameter, body=nested.expression), nested

    def _match(self, path: str, source_type: Any) -> tuple[FieldDescriptor, str]:
        """Pick the field ``path`` starts with. Returns the field and the rest of the path."""
        fields = self._provider.list_fields(source_type)

        exact: list[FieldDescriptor] = []
        candidates: list[tuple[FieldDescriptor, int]] = []
        for f in fields:
            end = self._consume(path, f.name)
            if end is None:
                continue
            if end == len(path):
                exact.append(f)
            else:
                candidates.append((f, end))

        if len(exact) > 1:
            raise AmbiguousPathError(path, type_name(source_type), [f.name for f in exact])
        if exact:
            return exact[0], ""

        if not candidates:
            raise UnresolvedPathError(path, type_name(source_type))
        if len(candidates) > 1:
            raise AmbiguousPathError(
                path,
                type_name(source_type),
                [f.name for f, _ in candidates],
            )

        field, end = candidates[0]
        remainder = path[end:].lstrip(self._config.separators)
        logger.debug(
            "Path '%s' on %s steps into '%s', remainder '%s'",
            path,
            type_name(source_type),
            field.name,
            remainder,
        )
        return field, remainder

    def _consume(self, path: str, name: str) -> int | None:
        """Index in ``path`` just past ``name``, or None if ``path`` does not start with it.

        Case and separators are ignored on both sides, so ``simpleEntityId``
        consumes the whole of ``simple_entity_id``.
        """
        separators = self._config.separators
        letters = [c for c in name.lower() if c not in separators]
        if not letters:
            return None
        i = 0
        for letter in letters:
            while i < len(path) and path[i] in separators:
                i += 1
            if i == len(path) or path[i].lower() != letter:
                return None
            i += 1
        return i
