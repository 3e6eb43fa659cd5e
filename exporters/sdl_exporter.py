"""Schema concatenation exporter: every definition after what it depends on."""

from pathlib import Path
from typing import List, Optional

from graph.model import SchemaGraph
from graph.ordering import topological_order


def to_sdl(
    graph: SchemaGraph,
    root: Optional[Path] = None,
    with_sources: bool = False,
) -> str:
    """
    Concatenate all definitions into a single schema document.

    Definitions are emitted in dependency order, so each one comes after
    the definitions it references (cycles aside).

    Args:
        graph: The schema graph to export.
        root: Schema root, used to shorten source file comments.
        with_sources: If True, precede each definition with a comment
                      naming the file it came from.

    Returns:
        Schema document text ending in a newline, or "" for an empty graph.
    """
    blocks: List[str] = []

    for index in topological_order(graph):
        entity = graph[index].entity
        text = entity.definition_text.strip()
        if with_sources:
            text = f"# {_get_source_label(entity.source_file, root)}\n{text}"
        blocks.append(text)

    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def _get_source_label(path: Path, root: Optional[Path]) -> str:
    if root is not None:
        try:
            return str(path.resolve().relative_to(root.resolve())).replace("\\", "/")
        except ValueError:
            pass
    return str(path).replace("\\", "/")
