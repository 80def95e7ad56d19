"""
Example 02: Flattening and Collections

This example demonstrates flattened paths (customer_name -> customer.name),
nested object mapping and element-wise projection of collections.
"""

from dataclasses import dataclass, field
from typing import Annotated

from select_map import MapFrom, MappingRegistry


@dataclass
class Customer:
    id: int
    name: str


@dataclass
class Line:
    sku: str
    quantity: int


@dataclass
class Order:
    id: int
    customer: Customer | None
    lines: list[Line] = field(default_factory=list)


@dataclass
class CustomerRef:
    id: int


@dataclass
class LineDTO:
    sku: str
    quantity: float


@dataclass
class OrderDTO:
    id: int
    customer_name: str | None
    customer: CustomerRef | None
    lines: list[LineDTO]
    skus: Annotated[tuple[str, ...], MapFrom("lines_sku")]


def main():
    registry = MappingRegistry()
    orders = [
        Order(1, Customer(7, "Alice"), [Line("A-1", 2), Line("B-2", 1)]),
        Order(2, None, []),
    ]

    print("=== Flattening and Collections ===\n")

    print("1. Generated mapping:")
    print(f"   {registry.get_mapping(Order, OrderDTO).source}\n")

    print("2. Lazy projection:")
    for dto in registry.project(orders, OrderDTO):
        print(f"   - #{dto.id} {dto.customer_name}: {dto.skus}")
        for line in dto.lines:
            print(f"       {line.sku} x {line.quantity}")


if __name__ == "__main__":
    main()
