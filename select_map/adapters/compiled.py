"""In-process mapping compiler.

Compiles a mapping AST into nested Python closures. Evaluation is
null-propagating: reading a field of ``None``, projecting ``None`` or
converting ``None`` all yield ``None``, and guarded objects become ``None``
when their source is missing.

Destination instances are constructed the way their class expects:
1. Pydantic BaseModel -> model_validate(values)
2. dataclass or class with its own ``__init__`` -> target_class(**values)
3. Plain class -> target_class(), then setattr per bound field
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from select_map.core.exceptions import ConstructionError, ConversionError
from select_map.core.types import is_pydantic_model, type_name
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

Scope = dict[Parameter, Any]
Thunk = Callable[[Scope], Any]


def instance_factory(target_class: type) -> Callable[[dict[str, Any]], Any]:
    """Pick the construction strategy for ``target_class``."""
    name = target_class.__name__

    if is_pydantic_model(target_class):

        def validate(values: dict[str, Any]) -> Any:
            try:
                return target_class.model_validate(values)  # type: ignore[attr-defined]
            except ValidationError as e:
                raise ConstructionError(name, str(e)) from e

        return validate

    if dataclasses.is_dataclass(target_class) or target_class.__init__ is not object.__init__:

        def call(values: dict[str, Any]) -> Any:
            try:
                return target_class(**values)
            except TypeError as e:
                raise ConstructionError(name, str(e)) from e

        return call

    def populate(values: dict[str, Any]) -> Any:
        instance = target_class()
        for field, value in values.items():
            setattr(instance, field, value)
        return instance

    return populate


class ClosureCompiler:
    """Compiles mapping ASTs into Python callables."""

    def compile(self, expression: Lambda) -> Callable[[Any], Any]:
        mapping = self.compile_expression(expression.parameter, expression.body)
        mapping.__name__ = (
            f"map_{type_name(expression.source_type)}_to_{type_name(expression.dest_type)}"
        )
        return mapping

    def compile_expression(self, parameter: Parameter, expression: Expr) -> Callable[[Any], Any]:
        """Compile a standalone expression over ``parameter``, e.g. a resolved path."""
        body = self._compile_expr(expression)

        def evaluate(source: Any) -> Any:
            return body({parameter: source})

        return evaluate

    def _compile_expr(self, node: Expr) -> Thunk:
        if isinstance(node, Parameter):
            return lambda scope: scope[node]

        if isinstance(node, FieldAccess):
            return self._compile_access(node)

        if isinstance(node, Projection):
            return self._compile_projection(node)

        if isinstance(node, Convert):
            return self._compile_convert(node)

        if isinstance(node, Constant):
            value = node.value
            return lambda scope: value

        if isinstance(node, NullGuard):
            operand = self._compile_expr(node.operand)
            body = self._compile_expr(node.body)
            return lambda scope: None if operand(scope) is None else body(scope)

        if isinstance(node, Construct):
            return self._compile_construct(node)

        raise TypeError(f"Cannot compile node of type {type(node).__name__}")

    def _compile_access(self, node: FieldAccess) -> Thunk:
        target = self._compile_expr(node.target)
        field = node.field

        def access(scope: Scope) -> Any:
            value = target(scope)
            if value is None:
                return None
            return getattr(value, field)

        return access

    def _compile_projection(self, node: Projection) -> Thunk:
        source = self._compile_expr(node.source)
        body = self._compile_expr(node.body)
        parameter = node.parameter

        def project(scope: Scope) -> Any:
            items = source(scope)
            if items is None:
                return None
            return [body({**scope, parameter: item}) for item in items]

        return project

    def _compile_convert(self, node: Convert) -> Thunk:
        operand = self._compile_expr(node.operand)
        target_type = node.type

        def convert(scope: Scope) -> Any:
            value = operand(scope)
            if value is None:
                return None
            try:
                return target_type(value)
            except (TypeError, ValueError) as e:
                raise ConversionError(type_name(target_type), value) from e

        return convert

    def _compile_construct(self, node: Construct) -> Thunk:
        bindings = [self._compile_binding(binding) for binding in node.bindings]
        factory = instance_factory(node.type)

        def construct(scope: Scope) -> Any:
            return factory({field: value(scope) for field, value in bindings})

        return construct

    def _compile_binding(self, binding: Binding) -> tuple[str, Thunk]:
        if isinstance(binding, (ScalarBinding, ObjectBinding, GuardedObjectBinding)):
            return binding.field, self._compile_expr(binding.value)

        if isinstance(binding, CollectionBinding):
            value = self._compile_expr(binding.value)
            return binding.field, self._materialize(value, binding.container)

        if isinstance(binding, ProjectedCollectionBinding):
            value = self._compile_expr(binding.projection)
            return binding.field, self._materialize(value, binding.container)

        raise TypeError(f"Cannot compile binding of type {type(binding).__name__}")

    @staticmethod
    def _materialize(value: Thunk, container: type | None) -> Thunk:
        if container is None:
            return value

        def materialize(scope: Scope) -> Any:
            items = value(scope)
            if items is None:
                return None
            return container(items)

        return materialize
