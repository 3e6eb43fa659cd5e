"""Parser for schema definition documents."""

from pathlib import Path
from typing import List, Optional

from graphql import GraphQLSyntaxError, parse
from graphql.language import ast

from .kinds import SUPPORTED_DEFINITIONS


class SchemaParseError(ValueError):
    """Raised when a schema document cannot be turned into definitions."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path is not None else message)


def parse_definitions(text: str, path: Optional[Path] = None) -> List[ast.Node]:
    """
    Parse schema text into its ordered top-level definitions.
    
    Args:
        text: Full contents of a schema file.
        path: Optional originating file, used in error messages.
    
    Returns:
        Definitions in document order. Blank or comment-only text yields
        an empty list.
    
    Raises:
        SchemaParseError: If the text is not valid schema syntax, or it
            contains something other than type, extension, schema or
            directive definitions.
    """
    if _is_blank(text):
        return []
    
    try:
        document = parse(text)
    except GraphQLSyntaxError as e:
        raise SchemaParseError(e.message, path) from e
    
    definitions = list(document.definitions)
    for definition in definitions:
        if not isinstance(definition, SUPPORTED_DEFINITIONS):
            raise SchemaParseError(_describe_unsupported(definition), path)
    
    return definitions


def _is_blank(text: str) -> bool:
    """Check whether text holds nothing but whitespace, commas and comments."""
    for line in text.splitlines():
        stripped = line.lstrip("\ufeff").replace(",", " ").strip()
        if stripped and not stripped.startswith("#"):
            return False
    return True


def _describe_unsupported(definition: ast.Node) -> str:
    """Build an error message for a definition outside the schema language."""
    location = ""
    if definition.loc is not None:
        line, column = _line_column(definition.loc.source.body, definition.loc.start)
        location = f" at line {line}, column {column}"
    
    if isinstance(definition, ast.ExecutableDefinitionNode):
        return f"Executable definitions are not allowed in schema documents{location}"
    if isinstance(definition, ast.SchemaExtensionNode):
        return f"Schema extensions are not supported{location}"
    return f"Unsupported definition {type(definition).__name__}{location}"


def _line_column(body: str, offset: int):
    line = body.count("\n", 0, offset) + 1
    column = offset - (body.rfind("\n", 0, offset) + 1) + 1
    return line, column
