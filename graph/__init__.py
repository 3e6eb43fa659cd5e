"""Dependency graph of schema definitions."""

from .model import SchemaGraph, Node, Entity, EXTENSION_SUFFIX, SCHEMA_ID, get_extended_id
from .ordering import topological_order

__all__ = [
    "SchemaGraph",
    "Node",
    "Entity",
    "EXTENSION_SUFFIX",
    "SCHEMA_ID",
    "get_extended_id",
    "topological_order",
]
