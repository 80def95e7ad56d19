"""
Example 01: Basic Mapping

This example demonstrates mapping objects to dataclasses and Pydantic models
by field name, with explicit overrides and excluded fields.
"""

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel

from select_map import MapFrom, MappingRegistry, NotMapped, ProjectionMapper


@dataclass
class User:
    """Source object, e.g. an ORM entity"""
    id: int
    name: str
    email: str
    password_hash: str


@dataclass
class UserSummary:
    """Destination dataclass"""
    id: int
    display_name: Annotated[str, MapFrom("name")]
    password_hash: Annotated[str | None, NotMapped()] = None


class UserSchema(BaseModel):
    """Destination Pydantic model"""
    id: int
    name: str
    email: str


def main():
    registry = MappingRegistry()
    users = [
        User(1, "Alice", "alice@example.com", "x1"),
        User(2, "Bob", "bob@example.com", "x2"),
    ]

    print("=== Basic Mapping ===\n")

    # Map to dataclass
    print("1. Dataclass Mapping:")
    summary = registry.map(users[0], UserSummary)
    print(f"   Type: {type(summary).__name__}")
    print(f"   Data: {summary}")
    print(f"   Mapping: {registry.get_mapping(User, UserSummary).source}\n")

    # Map to Pydantic model
    print("2. Pydantic Model Mapping:")
    mapper = ProjectionMapper(User, UserSchema, registry)
    for u in mapper.map_many(users):
        print(f"   - {u.name}: {u.email}")
    print()

    print(f"Cached mappings: {len(registry)}")


if __name__ == "__main__":
    main()
