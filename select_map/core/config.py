"""Mapper configuration.

MapperConfig is a Pydantic model shared by the path resolver, the mapping
synthesizer and the mapping registry.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MapperConfig(BaseModel):
    """Configuration for mapping synthesis."""

    max_depth: int = Field(default=8, ge=0)
    separators: str = "_."
    coerce_scalars: bool = True
