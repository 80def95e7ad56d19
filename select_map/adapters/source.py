"""Python source rendering of mapping ASTs.

Translates a mapping into the equivalent Python lambda text, e.g.::

    lambda src: OrderModel(id=src.id, lines_sku=list([item.sku for item in src.lines]))

Used for debug logging and for inspecting what the synthesizer inferred.
"""

from __future__ import annotations

from select_map.core.types import type_name
from select_map.mapping.ast import (
    Binding,
    CollectionBinding,
    Constant,
    Construct,
    Convert,
    Expr,
    FieldAccess,
    GuardedObjectBinding,
    Lambda,
    NullGuard,
    ObjectBinding,
    Parameter,
    ProjectedCollectionBinding,
    Projection,
    ScalarBinding,
)


def render(node: Expr | Lambda) -> str:
    """Render an expression or mapping root as Python source text."""
    if isinstance(node, Lambda):
        return f"lambda {node.parameter.name}: {render(node.body)}"
    if isinstance(node, Parameter):
        return node.name
    if isinstance(node, FieldAccess):
        return f"{render(node.target)}.{node.field}"
    if isinstance(node, Projection):
        return f"[{render(node.body)} for {node.parameter.name} in {render(node.source)}]"
    if isinstance(node, Convert):
        return f"{type_name(node.type)}({render(node.operand)})"
    if isinstance(node, Constant):
        return repr(node.value)
    if isinstance(node, NullGuard):
        return f"(None if {render(node.operand)} is None else {render(node.body)})"
    if isinstance(node, Construct):
        arguments = ", ".join(f"{b.field}={_render_binding(b)}" for b in node.bindings)
        return f"{type_name(node.type)}({arguments})"
    raise TypeError(f"Cannot render node of type {type(node).__name__}")


def _render_binding(binding: Binding) -> str:
    if isinstance(binding, (ScalarBinding, ObjectBinding, GuardedObjectBinding)):
        return render(binding.value)
    if isinstance(binding, CollectionBinding):
        value = render(binding.value)
    elif isinstance(binding, ProjectedCollectionBinding):
        value = render(binding.projection)
    else:
        raise TypeError(f"Cannot render binding of type {type(binding).__name__}")
    if binding.container is None:
        return value
    return f"{binding.container.__name__}({value})"
