"""Unit tests for MappingSynthesizer."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Annotated

import pytest

from select_map.core.config import MapperConfig
from select_map.core.exceptions import (
    AmbiguousPathError,
    ShapeMismatchError,
    UnresolvedPathError,
    UnsupportedContainerError,
)
from select_map.core.metadata import MapFrom, NotMapped
from select_map.mapping.ast import (
    CollectionBinding,
    Constant,
    Construct,
    Convert,
    GuardedObjectBinding,
    NullGuard,
    ObjectBinding,
    Parameter,
    ProjectedCollectionBinding,
    ScalarBinding,
)
from select_map.mapping.path import PathResolver
from select_map.mapping.synthesizer import MappingSynthesizer

# --- Source models ---


@dataclass
class Item:
    name: str = ""
    price: int = 0


@dataclass
class Customer:
    id: int = 0
    name: str = ""


@dataclass
class Order:
    id: int = 0
    total: int = 0
    customer: Customer | None = None
    items: list[Item] = field(default_factory=list)
    scores: list[int] = field(default_factory=list)


@dataclass
class Node:
    name: str = ""
    child: Node | None = None


# --- Destination models ---


@dataclass
class ItemModel:
    name: str = ""


@dataclass
class CustomerModel:
    id: int = 0
    secret: Annotated[str | None, NotMapped()] = None


@dataclass
class OrderModel:
    id: int = 0
    total: float = 0.0
    customer_name: str | None = None
    customer: CustomerModel | None = None
    items: list[ItemModel] = field(default_factory=list)
    item_names: Annotated[tuple[str, ...], MapFrom("items_name")] = ()
    scores: list[float] = field(default_factory=list)
    notes: Annotated[str | None, NotMapped()] = None


@dataclass
class DirectModel:
    customer: Customer | None = None
    scores: list[int] = field(default_factory=list)
    items_price: Sequence[int] = ()


@dataclass
class NodeModel:
    name: str = ""
    child: NodeModel | None = None


@dataclass
class EmptyModel:
    pass


@dataclass
class BadScalarModel:
    customer: int = 0


@dataclass
class SetModel:
    scores: set[int] = field(default_factory=set)


@dataclass
class MissingModel:
    does_not_exist: str = ""


@dataclass
class Account:
    user_name: str = ""
    user: Customer | None = None


@dataclass
class Holder:
    account: Account | None = None


@dataclass
class AccountModel:
    user_name_suffix: str = ""


@dataclass
class HolderModel:
    account: AccountModel | None = None


@dataclass
class MaybeBasket:
    items: list[Item | None] = field(default_factory=list)


@dataclass
class BasketModel:
    items: list[ItemModel] = field(default_factory=list)


@dataclass
class MaybeBasketModel:
    items: list[ItemModel | None] = field(default_factory=list)


@dataclass
class StrictNodeModel:
    name: str
    child: StrictNodeModel | None
    note: Annotated[str | None, NotMapped()]


def _bindings(construct: Construct) -> dict:
    return {binding.field: binding for binding in construct.bindings}


class TestBindingShapes:
    def test_binding_variants(self, synthesizer: MappingSynthesizer) -> None:
        construct = synthesizer.build(Parameter("src", Order), OrderModel)
        bindings = _bindings(construct)

        assert isinstance(bindings["id"], ScalarBinding)
        assert isinstance(bindings["total"], ScalarBinding)
        assert isinstance(bindings["customer_name"], ScalarBinding)
        assert isinstance(bindings["customer"], GuardedObjectBinding)
        assert isinstance(bindings["items"], ProjectedCollectionBinding)
        assert isinstance(bindings["item_names"], CollectionBinding)
        assert isinstance(bindings["scores"], ProjectedCollectionBinding)
        assert "notes" not in bindings

    def test_scalar_conversion(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Order), OrderModel))
        assert isinstance(bindings["total"].value, Convert)
        assert bindings["total"].value.type is float
        assert not isinstance(bindings["id"].value, Convert)

    def test_scalar_conversion_disabled(self) -> None:
        config = MapperConfig(coerce_scalars=False)
        synthesizer = MappingSynthesizer(PathResolver(config=config), config)
        bindings = _bindings(synthesizer.build(Parameter("src", Order), OrderModel))
        assert not isinstance(bindings["total"].value, Convert)

    def test_guarded_object(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Order), OrderModel))
        guard = bindings["customer"].value
        assert isinstance(guard, NullGuard)
        assert guard.type is CustomerModel
        assert [b.field for b in guard.body.bindings] == ["id"]

    def test_element_mapping_and_materialization(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Order), OrderModel))
        items = bindings["items"]
        assert isinstance(items.element, Construct)
        assert items.element.type is ItemModel
        assert items.container is list

        scores = bindings["scores"]
        assert scores.element == Convert(operand=scores.parameter, type=float)
        assert scores.container is list

    def test_flattened_collection_to_tuple(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Order), OrderModel))
        assert bindings["item_names"].container is tuple

    def test_direct_bindings(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Order), DirectModel))
        assert isinstance(bindings["customer"], ObjectBinding)
        assert isinstance(bindings["scores"], CollectionBinding)
        assert bindings["scores"].container is None
        # A projected sequence is not a Sequence; it is materialized.
        assert bindings["items_price"].container is list

    def test_empty_destination(self, synthesizer: MappingSynthesizer) -> None:
        construct = synthesizer.build(Parameter("src", Order), EmptyModel)
        assert construct == Construct(type=EmptyModel, bindings=())


class TestDeterminism:
    def test_repeated_builds_are_equal(self, synthesizer: MappingSynthesizer) -> None:
        first = synthesizer.build_lambda(Order, OrderModel)
        second = synthesizer.build_lambda(Order, OrderModel)
        assert first == second
        assert first is not second

    def test_independent_synthesizers_agree(self) -> None:
        assert MappingSynthesizer().build_lambda(Order, OrderModel) == (
            MappingSynthesizer().build_lambda(Order, OrderModel)
        )


class TestDepthGuard:
    def test_self_reference_terminates(self, synthesizer: MappingSynthesizer) -> None:
        construct = synthesizer.build(Parameter("src", Node), NodeModel)
        levels = 0
        while construct is not None:
            levels += 1
            child = _bindings(construct).get("child")
            construct = child.value.body if child is not None else None
        # Depths 0 through 8 are mapped; the ninth level omits its child.
        assert levels == 9

    def test_too_deep_returns_none(self, synthesizer: MappingSynthesizer) -> None:
        assert synthesizer.build(Parameter("src", Node), NodeModel, depth=9) is None

    def test_custom_depth(self) -> None:
        config = MapperConfig(max_depth=1)
        synthesizer = MappingSynthesizer(PathResolver(config=config), config)
        construct = synthesizer.build(Parameter("src", Node), NodeModel)
        child = _bindings(construct)["child"].value.body
        assert "child" not in _bindings(child)

    def test_zero_depth_maps_root_only(self) -> None:
        config = MapperConfig(max_depth=0)
        synthesizer = MappingSynthesizer(PathResolver(config=config), config)
        mapping = synthesizer.build_lambda(Node, NodeModel)
        assert [b.field for b in mapping.body.bindings] == ["name"]


class TestErrors:
    def test_unresolved_path_aborts(self, synthesizer: MappingSynthesizer) -> None:
        with pytest.raises(UnresolvedPathError):
            synthesizer.build_lambda(Order, MissingModel)

    def test_nested_ambiguity_aborts_whole_build(self, synthesizer: MappingSynthesizer) -> None:
        with pytest.raises(AmbiguousPathError):
            synthesizer.build_lambda(Holder, HolderModel)

    def test_object_to_scalar(self, synthesizer: MappingSynthesizer) -> None:
        with pytest.raises(ShapeMismatchError, match="customer"):
            synthesizer.build_lambda(Order, BadScalarModel)

    def test_unsupported_container(self, synthesizer: MappingSynthesizer) -> None:
        with pytest.raises(UnsupportedContainerError, match="scores"):
            synthesizer.build_lambda(Order, SetModel)

    def test_scalar_destination(self, synthesizer: MappingSynthesizer) -> None:
        with pytest.raises(ShapeMismatchError):
            synthesizer.build_lambda(Order, str)


class TestOptionalElements:
    def test_optional_source_elements(self, synthesizer: MappingSynthesizer) -> None:
        items = _bindings(synthesizer.build(Parameter("src", MaybeBasket), BasketModel))["items"]
        assert isinstance(items, ProjectedCollectionBinding)
        assert items.parameter.type is Item
        assert items.element == NullGuard(operand=items.parameter, body=items.element.body)
        assert items.element.body.type is ItemModel
        assert items.container is list

    def test_optional_dest_elements(self, synthesizer: MappingSynthesizer) -> None:
        items = _bindings(synthesizer.build(Parameter("src", Order), MaybeBasketModel))["items"]
        assert isinstance(items.element, NullGuard)
        assert items.element.body.type is ItemModel

    def test_required_elements_stay_unguarded(self, synthesizer: MappingSynthesizer) -> None:
        items = _bindings(synthesizer.build(Parameter("src", Order), BasketModel))["items"]
        assert isinstance(items.element, Construct)

    def test_flattening_through_optional_elements(self, resolver: PathResolver) -> None:
        expression = resolver.select(Parameter("src", MaybeBasket), "items_name")
        assert expression.parameter.type is Item
        assert expression.body.type is str


class TestRequiredNullableFields:
    def test_excluded_field_is_bound_to_none(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Node), StrictNodeModel))
        assert bindings["note"] == ScalarBinding(
            field="note", value=Constant(value=None, type=str)
        )

    def test_cut_off_field_is_bound_to_none(self) -> None:
        config = MapperConfig(max_depth=0)
        synthesizer = MappingSynthesizer(PathResolver(config=config), config)
        bindings = _bindings(synthesizer.build(Parameter("src", Node), StrictNodeModel))
        assert bindings["child"].value == Constant(value=None, type=StrictNodeModel)
        assert bindings["name"].value.field == "name"

    def test_fields_with_defaults_are_omitted(self, synthesizer: MappingSynthesizer) -> None:
        bindings = _bindings(synthesizer.build(Parameter("src", Order), OrderModel))
        assert "notes" not in bindings
