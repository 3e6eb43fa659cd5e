"""Extraction of referenced type names from schema definitions."""

from typing import Callable, Dict, Iterable, Iterator, List, Type

from graphql.language import ast


Extractor = Callable[[ast.Node], Iterator[str]]


def get_dependencies(definition: ast.Node) -> List[str]:
    """
    Return the names of the definitions referenced by a definition.

    List and non-null wrappers are unwrapped to the named type. Names keep
    the order in which they first appear and are never repeated.

    Type extensions only report what they add; the name of the type they
    extend is not a dependency.

    Args:
        definition: A top-level definition node.

    Returns:
        Ordered list of referenced names.

    Raises:
        TypeError: If no extractor is registered for the definition.
    """
    try:
        extractor = _EXTRACTORS[type(definition)]
    except KeyError:
        raise TypeError(f"No dependency extractor for {type(definition).__name__}") from None

    return list(dict.fromkeys(extractor(definition)))


def named_type(type_node: ast.TypeNode) -> str:
    """Unwrap list and non-null wrappers down to the named type."""
    while not isinstance(type_node, ast.NamedTypeNode):
        type_node = type_node.type
    return type_node.name.value


def _names(nodes: Iterable[ast.NamedTypeNode]) -> Iterator[str]:
    for node in nodes or ():
        yield node.name.value


def _input_values(values: Iterable[ast.InputValueDefinitionNode]) -> Iterator[str]:
    for value in values or ():
        yield named_type(value.type)


def _fields(fields: Iterable[ast.FieldDefinitionNode]) -> Iterator[str]:
    for field in fields or ():
        yield named_type(field.type)
        yield from _input_values(field.arguments)


def _object_like(definition) -> Iterator[str]:
    # Objects and interfaces: implemented interfaces first, then fields.
    yield from _names(definition.interfaces)
    yield from _fields(definition.fields)


def _input_object(definition) -> Iterator[str]:
    yield from _input_values(definition.fields)


def _union(definition) -> Iterator[str]:
    yield from _names(definition.types)


def _no_dependencies(definition) -> Iterator[str]:
    return iter(())


def _schema(definition: ast.SchemaDefinitionNode) -> Iterator[str]:
    for operation_type in definition.operation_types or ():
        yield operation_type.type.name.value


def _directive(definition: ast.DirectiveDefinitionNode) -> Iterator[str]:
    yield from _input_values(definition.arguments)


_EXTRACTORS: Dict[Type[ast.Node], Extractor] = {
    ast.EnumTypeDefinitionNode: _no_dependencies,
    ast.InputObjectTypeDefinitionNode: _input_object,
    ast.InterfaceTypeDefinitionNode: _object_like,
    ast.ObjectTypeDefinitionNode: _object_like,
    ast.ScalarTypeDefinitionNode: _no_dependencies,
    ast.UnionTypeDefinitionNode: _union,
    ast.EnumTypeExtensionNode: _no_dependencies,
    ast.InputObjectTypeExtensionNode: _input_object,
    ast.InterfaceTypeExtensionNode: _object_like,
    ast.ObjectTypeExtensionNode: _object_like,
    ast.ScalarTypeExtensionNode: _no_dependencies,
    ast.UnionTypeExtensionNode: _union,
    ast.SchemaDefinitionNode: _schema,
    ast.DirectiveDefinitionNode: _directive,
}
