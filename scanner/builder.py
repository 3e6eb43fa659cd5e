"""Graph builder that orchestrates collection, parsing and graph construction."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from graph.model import SCHEMA_ID, Entity, Node, SchemaGraph
from sdl.dependencies import get_dependencies
from sdl.kinds import Category, classify
from sdl.parser import parse_definitions
from .discovery import FileTable, collect_files


logger = logging.getLogger(__name__)


def create_entity(definition, source_file: Path, source_text: str) -> Entity:
    """
    Build the entity describing one parsed definition.

    Args:
        definition: A top-level definition node.
        source_file: Path of the file the definition came from.
        source_text: Full contents of that file.

    Returns:
        Entity with kind, name, dependency names and provenance filled in.
    """
    kind = classify(definition)

    # A schema declaration has no name, use a default one.
    if kind.category is Category.SCHEMA:
        name = SCHEMA_ID
    else:
        name = definition.name.value

    span = None
    if definition.loc is not None:
        span = (definition.loc.start, definition.loc.end)

    return Entity(
        kind=kind,
        name=name,
        source_file=source_file,
        source_text=source_text,
        dependency_names=get_dependencies(definition),
        span=span,
    )


def add_nodes(files: FileTable, graph: SchemaGraph) -> Dict[int, List[str]]:
    """
    Parse every file and add one node per definition.

    Args:
        files: Collected schema files.
        graph: Graph receiving the nodes.

    Returns:
        Dependency names of each new node, keyed by node index.

    Raises:
        SchemaParseError: If any file is not a valid schema document. The
            graph may already hold nodes from earlier files.
    """
    dependency_map: Dict[int, List[str]] = {}

    for path, contents in files.items():
        definitions = parse_definitions(contents, path)

        for definition in definitions:
            entity = create_entity(definition, path, contents)
            node_index = graph.add_node(Node.for_entity(entity))
            dependency_map[node_index] = list(entity.dependency_names)

        logger.debug("Parsed %d definition(s) from %s", len(definitions), path)

    return dependency_map


def add_edges(graph: SchemaGraph, dependency_map: Dict[int, List[str]]) -> None:
    """
    Resolve dependency names against node ids and add the edges.

    Each resolved name adds an edge from the dependency to the dependent.
    Names that match no node produce no edge; they are recorded as missing
    references on the graph instead. A definition referencing its own id
    (a recursive type) gets no self-loop.

    Args:
        graph: Graph holding the complete node set.
        dependency_map: Dependency names keyed by dependent node index.
    """
    id_index = graph.index_by_id()

    for node_index, dependencies in dependency_map.items():
        for dependency in dependencies:
            index = id_index.get(dependency)
            if index is None:
                graph.add_missing(node_index, dependency)
                logger.debug(
                    "Unresolved dependency %r of %s", dependency, graph[node_index].id
                )
                continue
            if index == node_index:
                continue
            graph.update_edge(index, node_index)


def populate_graph(files: FileTable, graph: Optional[SchemaGraph] = None) -> SchemaGraph:
    """
    Build the dependency graph of a set of schema files.

    All nodes are added before any edge is resolved, so references to
    definitions in files processed later still resolve.

    Args:
        files: Collected schema files.
        graph: Graph to populate. A new one is created if None.

    Returns:
        The populated graph.
    """
    if graph is None:
        graph = SchemaGraph()

    dependency_map = add_nodes(files, graph)
    add_edges(graph, dependency_map)

    for node_id, indices in graph.duplicates.items():
        sources = ", ".join(str(graph[i].entity.source_file) for i in indices)
        logger.warning(
            "Identifier %r is defined %d times (%s); references resolve to the first",
            node_id, len(indices), sources,
        )

    if graph.has_missing():
        logger.info("%d dependency name(s) did not resolve", sum(1 for _ in graph.iter_missing()))

    logger.info("Built %r from %d file(s)", graph, len(files))
    return graph


async def collect_and_build(
    root: Path,
    include_ext: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
    workers: int = 1,
) -> Tuple[FileTable, SchemaGraph]:
    """
    Collect the schema files under a root and build their graph.

    Returns:
        The file table and the populated graph.
    """
    files = await collect_files(
        root,
        include_ext=include_ext,
        exclude_dirs=exclude_dirs,
        max_depth=max_depth,
        workers=workers,
    )
    return files, populate_graph(files)


def build_graph(
    root: Path,
    include_ext: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
    workers: int = 1,
) -> SchemaGraph:
    """
    Scan a schema directory and build its dependency graph.

    Args:
        root: Schema root directory.
        include_ext: File extensions to load (default: .graphql, .gql).
        exclude_dirs: Directory names to exclude (default: none).
        max_depth: Maximum directory depth to scan.
        workers: Number of concurrent directory workers.

    Returns:
        SchemaGraph of every definition found.
    """
    _, graph = asyncio.run(
        collect_and_build(
            root,
            include_ext=include_ext,
            exclude_dirs=exclude_dirs,
            max_depth=max_depth,
            workers=workers,
        )
    )
    return graph
