"""Scanner module for schema file collection and graph building."""

from .discovery import FileTable, FileDecodeError, collect_files
from .builder import add_nodes, add_edges, populate_graph, collect_and_build, build_graph

__all__ = [
    "FileTable",
    "FileDecodeError",
    "collect_files",
    "add_nodes",
    "add_edges",
    "populate_graph",
    "collect_and_build",
    "build_graph",
]
