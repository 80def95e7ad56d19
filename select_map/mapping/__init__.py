"""Mapping layer - path resolution, synthesis and mapping ASTs."""

from __future__ import annotations

from select_map.mapping.ast import (
    CollectionBinding,
    Constant,
    Construct,
    Convert,
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
from select_map.mapping.path import PathResolver, PathStep, ResolvedPath
from select_map.mapping.projector import ProjectionMapper
from select_map.mapping.protocol import Mapper
from select_map.mapping.synthesizer import MappingSynthesizer

__all__ = [
    "Mapper",
    "ProjectionMapper",
    "PathResolver",
    "PathStep",
    "ResolvedPath",
    "MappingSynthesizer",
    # AST
    "Parameter",
    "FieldAccess",
    "Projection",
    "Convert",
    "Constant",
    "NullGuard",
    "Construct",
    "Lambda",
    "ScalarBinding",
    "ObjectBinding",
    "GuardedObjectBinding",
    "CollectionBinding",
    "ProjectedCollectionBinding",
]
