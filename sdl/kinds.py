"""Definition kinds recognised in schema documents."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Type

from graphql.language import ast


class Category(Enum):
    """What family a top-level definition belongs to."""

    TYPE_DEFINITION = "TypeDefinition"
    TYPE_EXTENSION = "TypeExtension"
    SCHEMA = "Schema"
    DIRECTIVE = "Directive"


class Shape(Enum):
    """The shape of a type definition or type extension."""

    ENUM = "Enum"
    INPUT_OBJECT = "InputObject"
    INTERFACE = "Interface"
    OBJECT = "Object"
    SCALAR = "Scalar"
    UNION = "Union"


@dataclass(frozen=True)
class DefinitionKind:
    """
    Closed tagged variant over the definition families.

    Type definitions and type extensions carry a shape; schema and
    directive declarations do not.
    """

    category: Category
    shape: Optional[Shape] = None

    def __post_init__(self):
        shaped = self.category in (Category.TYPE_DEFINITION, Category.TYPE_EXTENSION)
        if shaped and self.shape is None:
            raise ValueError(f"{self.category.value} requires a shape")
        if not shaped and self.shape is not None:
            raise ValueError(f"{self.category.value} does not take a shape")

    @property
    def is_extension(self) -> bool:
        return self.category is Category.TYPE_EXTENSION

    def __str__(self) -> str:
        if self.shape is None:
            return self.category.value
        return f"{self.category.value}({self.shape.value})"


_KINDS: Dict[Type[ast.Node], DefinitionKind] = {
    ast.EnumTypeDefinitionNode: DefinitionKind(Category.TYPE_DEFINITION, Shape.ENUM),
    ast.InputObjectTypeDefinitionNode: DefinitionKind(Category.TYPE_DEFINITION, Shape.INPUT_OBJECT),
    ast.InterfaceTypeDefinitionNode: DefinitionKind(Category.TYPE_DEFINITION, Shape.INTERFACE),
    ast.ObjectTypeDefinitionNode: DefinitionKind(Category.TYPE_DEFINITION, Shape.OBJECT),
    ast.ScalarTypeDefinitionNode: DefinitionKind(Category.TYPE_DEFINITION, Shape.SCALAR),
    ast.UnionTypeDefinitionNode: DefinitionKind(Category.TYPE_DEFINITION, Shape.UNION),
    ast.EnumTypeExtensionNode: DefinitionKind(Category.TYPE_EXTENSION, Shape.ENUM),
    ast.InputObjectTypeExtensionNode: DefinitionKind(Category.TYPE_EXTENSION, Shape.INPUT_OBJECT),
    ast.InterfaceTypeExtensionNode: DefinitionKind(Category.TYPE_EXTENSION, Shape.INTERFACE),
    ast.ObjectTypeExtensionNode: DefinitionKind(Category.TYPE_EXTENSION, Shape.OBJECT),
    ast.ScalarTypeExtensionNode: DefinitionKind(Category.TYPE_EXTENSION, Shape.SCALAR),
    ast.UnionTypeExtensionNode: DefinitionKind(Category.TYPE_EXTENSION, Shape.UNION),
    ast.SchemaDefinitionNode: DefinitionKind(Category.SCHEMA),
    ast.DirectiveDefinitionNode: DefinitionKind(Category.DIRECTIVE),
}

SUPPORTED_DEFINITIONS: Tuple[Type[ast.Node], ...] = tuple(_KINDS)


def classify(definition: ast.Node) -> DefinitionKind:
    """
    Return the kind of a parsed top-level definition.

    Args:
        definition: A definition node produced by ``parse_definitions``.

    Returns:
        The matching DefinitionKind.

    Raises:
        TypeError: If the node is not a supported definition.
    """
    try:
        return _KINDS[type(definition)]
    except KeyError:
        raise TypeError(f"Unsupported definition: {type(definition).__name__}") from None
