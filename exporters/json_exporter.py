"""JSON exporter for schema graphs (machine-friendly format)."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from graph.model import SchemaGraph


def to_json(
    graph: SchemaGraph,
    root: Path,
    base: Optional[Path] = None,
    indent: int = 2,
    include_missing: bool = True,
    show_all: bool = True,
) -> str:
    """
    Convert a schema graph to JSON format.
    
    Args:
        graph: The schema graph to export.
        root: Schema root for relative paths.
        base: Optional base path for relative path display.
        indent: JSON indentation level.
        include_missing: If True, include missing (unresolved) references.
        show_all: If False, only include nodes with at least one connection.
    
    Returns:
        JSON string representation of the graph.
    """
    if base is None:
        base = root
    
    if show_all:
        indices = list(graph.node_indices())
    else:
        indices = sorted(graph.get_connected_nodes())
    
    # Build nodes list
    nodes: List[Dict[str, Any]] = []
    for index in indices:
        node = graph[index]
        entity = node.entity
        nodes.append({
            "id": node.id,
            "kind": str(entity.kind),
            "name": entity.name,
            "file": _get_path_str(entity.source_file, base, root),
            "dependencies": list(entity.dependency_names),
        })
    
    # Build edges list
    edges: List[Dict[str, Any]] = []
    for source, target in graph.iter_edges():
        edges.append({"source": graph[source].id, "target": graph[target].id})
    
    # Add missing edges if enabled
    if include_missing:
        for index, name in graph.iter_missing():
            edges.append({"source": name, "target": graph[index].id, "missing": True})
    
    data: Dict[str, Any] = {
        "nodes": nodes,
        "edges": edges,
    }
    
    return json.dumps(data, indent=indent)


def _get_path_str(path: Path, base: Path, root: Path) -> str:
    """Get the string representation of a path."""
    try:
        rel_path = path.resolve().relative_to(base.resolve())
        return str(rel_path).replace("\\", "/")
    except ValueError:
        try:
            rel_path = path.resolve().relative_to(root.resolve())
            return str(rel_path).replace("\\", "/")
        except ValueError:
            return str(path).replace("\\", "/")
