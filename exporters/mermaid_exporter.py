"""Mermaid flowchart exporter for schema graphs."""

import re
from pathlib import Path
from typing import Dict, List

from graph.model import SchemaGraph


def to_mermaid(
    graph: SchemaGraph,
    root: Path,
    orientation: str = "LR",
    group_by_file: bool = False,
    include_missing: bool = True,
    show_all: bool = True,
) -> str:
    """
    Convert a schema graph to Mermaid flowchart syntax.

    Edges point from a definition to the definitions that reference it.

    Args:
        graph: The schema graph to export.
        root: Schema root for relative file labels.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).
        group_by_file: If True, group nodes by their source file.
        include_missing: If True, show missing (unresolved) references.
        show_all: If False, leave out nodes with no connections.

    Returns:
        Mermaid flowchart string.
    """
    lines = [f"flowchart {orientation}"]

    if show_all:
        indices = list(graph.node_indices())
    else:
        indices = sorted(graph.get_connected_nodes())

    # Build node ID mapping; indices keep duplicated ids apart
    node_ids: Dict[int, str] = {
        index: _sanitize_id(f"n{index}_{graph[index].id}") for index in indices
    }

    # Build missing node ID mapping
    missing_ids: Dict[str, str] = {}
    if include_missing:
        for _, name in graph.iter_missing():
            if name not in missing_ids:
                missing_ids[name] = _sanitize_id(f"missing_{name}")

    if group_by_file:
        lines.extend(_generate_grouped_nodes(graph, root, indices, node_ids))
    else:
        for index in indices:
            lines.append(f'    {node_ids[index]}["{_get_label(graph, index)}"]')

    # Add missing node definitions (with different style)
    if missing_ids:
        lines.append("")
        lines.append("    %% Missing references")
        for name in sorted(missing_ids):
            missing_id = missing_ids[name]
            lines.append(f'    {missing_id}["{name} [MISSING]"]')
            lines.append(f"    style {missing_id} stroke:#ff0000,stroke-dasharray: 5 5")

    # Add edges
    lines.append("")
    for source, target in graph.iter_edges():
        lines.append(f"    {node_ids[source]} --> {node_ids[target]}")

    # Add missing edges (dashed)
    if include_missing:
        for index, name in graph.iter_missing():
            lines.append(f"    {missing_ids[name]} -.-> {node_ids[index]}")

    return "\n".join(lines)


def _generate_grouped_nodes(
    graph: SchemaGraph,
    root: Path,
    indices: List[int],
    node_ids: Dict[int, str],
) -> List[str]:
    """Generate node definitions inside one subgraph per source file."""
    lines = []

    groups: Dict[str, List[int]] = {}
    for index in indices:
        label = _get_file_label(graph[index].entity.source_file, root)
        groups.setdefault(label, []).append(index)

    for file_label in sorted(groups):
        subgraph_id = _sanitize_id(f"file_{file_label}")
        lines.append(f'    subgraph {subgraph_id}["{file_label}"]')
        for index in groups[file_label]:
            lines.append(f'        {node_ids[index]}["{_get_label(graph, index)}"]')
        lines.append("    end")

    return lines


def _sanitize_id(value: str) -> str:
    """
    Sanitize a string to be a valid Mermaid ID.

    Mermaid IDs can only contain letters, digits, and underscores.
    """
    sanitized = re.sub(r"[/\\.\-]", "_", value)
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    if sanitized and not sanitized[0].isalpha():
        sanitized = "n_" + sanitized
    return sanitized or "unknown"


def _get_label(graph: SchemaGraph, index: int) -> str:
    """Get the display label for a node."""
    node = graph[index]
    return f"{node.id}<br/><i>{node.entity.kind}</i>"


def _get_file_label(path: Path, root: Path) -> str:
    try:
        rel_path = path.resolve().relative_to(root.resolve())
        return str(rel_path).replace("\\", "/")
    except ValueError:
        return str(path).replace("\\", "/")
