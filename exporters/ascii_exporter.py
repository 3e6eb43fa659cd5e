"""ASCII tree-style exporter for schema graphs."""

from typing import List, Set, Tuple

from graph.model import SchemaGraph


# Unicode tree characters
UNICODE_BRANCH = "├── "
UNICODE_LAST = "└── "
UNICODE_VERTICAL = "│   "
UNICODE_SPACE = "    "

# ASCII fallback characters
ASCII_BRANCH = "|-- "
ASCII_LAST = "\\-- "
ASCII_VERTICAL = "|   "
ASCII_SPACE = "    "


def to_ascii(
    graph: SchemaGraph,
    style: str = "tree",
    include_missing: bool = True,
    show_all: bool = False,
) -> str:
    """
    Convert a schema graph to ASCII tree representation.

    Each tree starts at a definition nothing else references (typically the
    schema declaration or the root operation types) and lists, below every
    definition, the definitions it depends on.

    Args:
        graph: The schema graph to export.
        style: Output style - "tree" (Unicode) or "ascii" (pure ASCII).
        include_missing: If True, show missing (unresolved) references.
        show_all: If True, include nodes with no connections. Default False.

    Returns:
        ASCII tree string.
    """
    if style == "ascii":
        chars = (ASCII_BRANCH, ASCII_LAST, ASCII_VERTICAL, ASCII_SPACE)
    else:
        chars = (UNICODE_BRANCH, UNICODE_LAST, UNICODE_VERTICAL, UNICODE_SPACE)

    # Get the set of nodes to consider
    if show_all:
        nodes_to_show = set(graph.node_indices())
    else:
        nodes_to_show = graph.get_connected_nodes()

    # Top-level nodes are the ones no other node depends on
    top_nodes = _sorted(graph, (i for i in nodes_to_show if not graph.get_dependents(i)))

    # Everything sits on a cycle, start from every node instead
    if not top_nodes:
        top_nodes = _sorted(graph, nodes_to_show)

    lines: List[str] = []

    for i, top_node in enumerate(top_nodes):
        _render_node(
            graph=graph,
            index=top_node,
            prefix="",
            is_last=True,
            chars=chars,
            visited=set(),
            lines=lines,
            is_root=True,
            include_missing=include_missing,
        )

        # Add blank line between trees (except after last)
        if i < len(top_nodes) - 1:
            lines.append("")

    return "\n".join(lines)


def _render_node(
    graph: SchemaGraph,
    index: int,
    prefix: str,
    is_last: bool,
    chars: Tuple[str, str, str, str],
    visited: Set[int],
    lines: List[str],
    is_root: bool = False,
    include_missing: bool = True,
) -> None:
    """
    Recursively render a node and its dependencies.

    Args:
        graph: The schema graph.
        index: Current node to render.
        prefix: Current line prefix for indentation.
        is_last: Whether this is the last child of its parent.
        chars: Character set (branch, last, vertical, space).
        visited: Nodes on the current path (to detect cycles).
        lines: Output lines list (modified in place).
        is_root: Whether this is a root-level node.
        include_missing: If True, show missing (unresolved) references.
    """
    branch, last, vertical, space = chars

    node = graph[index]
    is_cycle = index in visited
    label = f"{node.id} ({node.entity.kind}){' [*]' if is_cycle else ''}"

    if is_root:
        lines.append(label)
    else:
        lines.append(f"{prefix}{last if is_last else branch}{label}")

    if is_cycle:
        return

    visited.add(index)

    children = _sorted(graph, graph.get_dependencies(index))
    missing_refs = sorted(graph.get_missing(index)) if include_missing else []
    total_items = len(children) + len(missing_refs)

    if is_root:
        new_prefix = ""
    else:
        new_prefix = prefix + (space if is_last else vertical)

    for item_index, child in enumerate(children, start=1):
        _render_node(
            graph=graph,
            index=child,
            prefix=new_prefix,
            is_last=(item_index == total_items),
            chars=chars,
            visited=visited,
            lines=lines,
            include_missing=include_missing,
        )

    for item_index, name in enumerate(missing_refs, start=len(children) + 1):
        connector = last if item_index == total_items else branch
        lines.append(f"{new_prefix}{connector}{name} [MISSING]")

    # Backtrack so the same node can appear in different branches
    visited.discard(index)


def _sorted(graph: SchemaGraph, indices) -> List[int]:
    return sorted(indices, key=lambda i: (graph[i].id, i))
