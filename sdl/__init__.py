"""Schema definition language support: parsing, classification and dependency extraction."""

from .parser import parse_definitions, SchemaParseError
from .kinds import Category, Shape, DefinitionKind, classify
from .dependencies import get_dependencies

__all__ = [
    "parse_definitions",
    "SchemaParseError",
    "Category",
    "Shape",
    "DefinitionKind",
    "classify",
    "get_dependencies",
]
