"""Mapping AST node classes.

Frozen dataclasses describing how to build a destination value from a source
value. Nodes compare by value, so two syntheses of the same type pair produce
equal trees. Adapters in ``select_map.adapters`` compile or render them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from select_map.core.types import iterable_of

# --- Expressions ---


@dataclass(frozen=True)
class Parameter:
    """A bound input value: the mapping's source or a collection element."""

    name: str
    type: Any


@dataclass(frozen=True)
class FieldAccess:
    """Read ``field`` from the value of ``target``."""

    target: Expr
    field: str
    type: Any


@dataclass(frozen=True)
class Projection:
    """Element-wise transform of a sequence: ``[body for parameter in source]``."""

    source: Expr
    parameter: Parameter
    body: Expr

    @property
    def type(self) -> Any:
        return iterable_of(self.body.type)


@dataclass(frozen=True)
class Convert:
    """Convert a scalar value to ``type`` (``None`` passes through)."""

    operand: Expr
    type: Any


@dataclass(frozen=True)
class Constant:
    """A fixed value, used to fill required nullable fields with ``None``."""

    value: Any
    type: Any


@dataclass(frozen=True)
class Construct:
    """A new ``type`` instance populated from ``bindings``."""

    type: Any
    bindings: tuple[Binding, ...] = ()


@dataclass(frozen=True)
class NullGuard:
    """``None`` when ``operand`` is None, otherwise ``body``."""

    operand: Expr
    body: Expr

    @property
    def type(self) -> Any:
        return self.body.type


@dataclass(frozen=True)
class Lambda:
    """Root of a synthesized mapping: a function of one source value."""

    parameter: Parameter
    body: Construct

    @property
    def source_type(self) -> Any:
        return self.parameter.type

    @property
    def dest_type(self) -> Any:
        return self.body.type


Expr = Union[  # noqa: UP007
    Parameter,
    FieldAccess,
    Projection,
    Convert,
    Constant,
    Construct,
    NullGuard,
]


# --- Bindings ---


@dataclass(frozen=True)
class ScalarBinding:
    """Assign a scalar value, converted when the field type differs."""

    field: str
    value: Expr


@dataclass(frozen=True)
class ObjectBinding:
    """Assign an object value that already fits the destination field."""

    field: str
    value: Expr


@dataclass(frozen=True)
class GuardedObjectBinding:
    """Assign a recursively mapped object, guarded against a missing source."""

    field: str
    value: NullGuard


@dataclass(frozen=True)
class CollectionBinding:
    """Assign a sequence, materialized into ``container`` when set."""

    field: str
    value: Expr
    container: type | None = None


@dataclass(frozen=True)
class ProjectedCollectionBinding:
    """Assign a sequence whose elements are remapped by ``element``.

    ``parameter`` binds each source element inside ``element``.
    """

    field: str
    source: Expr
    parameter: Parameter
    element: Expr
    container: type | None = None

    @property
    def projection(self) -> Projection:
        return Projection(source=self.source, parameter=self.parameter, body=self.element)


Binding = Union[  # noqa: UP007
    ScalarBinding,
    ObjectBinding,
    GuardedObjectBinding,
    CollectionBinding,
    ProjectedCollectionBinding,
]
