"""Mapping compiler protocol.

A compiler turns a synthesized mapping AST into something executable. The
registry accepts any implementation; ClosureCompiler is the in-process one.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from select_map.mapping.ast import Lambda


@runtime_checkable
class MappingCompiler(Protocol):
    """Compiles a mapping AST into a callable."""

    def compile(self, expression: Lambda) -> Callable[[Any], Any]:
        """Return a function mapping one source value to one destination value."""
        ...
