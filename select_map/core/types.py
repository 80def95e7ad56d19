"""Type shape helpers.

Classifies annotations into the three shapes the synthesizer cares about:
atomic scalars, collections and structured objects. Annotations may be
plain classes or ``typing`` aliases (``list[int]``, ``Sequence[Order]``,
``Optional[User]``).
"""

from __future__ import annotations

import collections.abc
import datetime
import decimal
import enum
import fractions
import pathlib
import types
import uuid
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel

# Values of these types are copied as a whole, never traversed or projected.
_ATOMIC_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    bool,
    decimal.Decimal,
    fractions.Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    enum.Enum,
    pathlib.PurePath,
    collections.abc.Mapping,
    type(None),
)

_LIST_LIKE: tuple[type, ...] = (
    list,
    collections.abc.MutableSequence,
    collections.abc.Sequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)


def strip_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *extras]`` into ``(T, extras)``."""
    if get_origin(tp) is Annotated:
        args = get_args(tp)
        return args[0], tuple(args[1:])
    return tp, ()


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Strip ``None`` from a union. Returns ``(type, nullable)``."""
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        remaining = [a for a in args if a is not type(None)]
        if len(remaining) == len(args):
            return tp, False
        if len(remaining) == 1:
            return remaining[0], True
        return Union[tuple(remaining)], True  # noqa: UP007
    return tp, False


def origin_class(tp: Any) -> type | None:
    """The runtime class behind an annotation, or None for special forms."""
    origin = get_origin(tp)
    if origin is None:
        return tp if isinstance(tp, type) else None
    return origin if isinstance(origin, type) else None


def _is_record_tuple(tp: Any) -> bool:
    """``tuple[int, str]`` is a fixed-shape record; ``tuple[int, ...]`` is not."""
    if get_origin(tp) is not tuple:
        return False
    args = get_args(tp)
    return not (len(args) == 2 and args[1] is Ellipsis)


def is_atomic(tp: Any) -> bool:
    """Check if values of ``tp`` are treated as indivisible scalars."""
    if tp is Any or get_origin(tp) in (Union, types.UnionType):
        return True
    cls = origin_class(tp)
    if cls is None:
        # Literals and type variables are opaque.
        return True
    if _is_record_tuple(tp):
        return True
    return issubclass(cls, _ATOMIC_TYPES)


def is_plain_class(tp: Any) -> bool:
    """Check if ``tp`` is a class rather than a parameterized alias."""
    return isinstance(tp, type) and get_origin(tp) is None


def is_pydantic_model(tp: Any) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return is_plain_class(tp) and issubclass(tp, BaseModel)


def is_collection(tp: Any) -> bool:
    """Check if ``tp`` is an iterable container other than a string-like scalar."""
    cls = origin_class(tp)
    if cls is None or is_atomic(tp):
        return False
    # BaseModel defines __iter__ over its fields; it is still an object.
    if is_pydantic_model(cls):
        return False
    return issubclass(cls, collections.abc.Iterable)


def is_structured(tp: Any) -> bool:
    """Check if ``tp`` is an object type whose fields can be mapped."""
    return (
        is_plain_class(tp)
        and not is_atomic(tp)
        and not is_collection(tp)
    )


def element_type(tp: Any) -> Any:
    """Element type of a collection annotation. ``Any`` when undeclared."""
    args = get_args(tp)
    return args[0] if args else Any


def iterable_of(tp: Any) -> Any:
    """The annotation of a lazily projected sequence of ``tp``."""
    return collections.abc.Iterable[tp]


def is_assignable(source: Any, dest: Any) -> bool:
    """Check if a value annotated ``source`` can be bound to ``dest`` unchanged."""
    if dest is Any or source is Any or source == dest:
        return True
    if get_origin(dest) in (Union, types.UnionType):
        return any(is_assignable(source, arg) for arg in get_args(dest))
    source_cls = origin_class(source)
    dest_cls = origin_class(dest)
    if source_cls is None or dest_cls is None:
        return False
    if not issubclass(source_cls, dest_cls):
        return False
    if not get_args(dest):
        return True
    if is_collection(source) and is_collection(dest):
        return is_assignable(element_type(source), element_type(dest))
    return get_args(source) == get_args(dest)


def container_kind(tp: Any) -> type | None:
    """Concrete container a projected sequence is materialized into.

    Returns ``list`` for list-like annotations, ``tuple`` for array-like
    ones, and None when the container kind is not supported.
    """
    cls = origin_class(tp)
    if cls is tuple:
        return tuple
    if cls in _LIST_LIKE:
        return list
    return None


def type_name(tp: Any) -> str:
    """Readable name of an annotation for messages and rendered source."""
    if is_plain_class(tp):
        return tp.__name__
    return repr(tp).replace("typing.", "").replace("collections.abc.", "")
