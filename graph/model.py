"""Graph data model for schema definitions and their dependencies."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from sdl.kinds import DefinitionKind


# Appended to the name of a type extension to form its node id
EXTENSION_SUFFIX = "Ext"

# Schema declarations have no name of their own
SCHEMA_ID = "Schema"


def get_extended_id(name: str) -> str:
    """Get the node id used for an extension of the named type."""
    return f"{name}{EXTENSION_SUFFIX}"


@dataclass
class Entity:
    """One parsed definition together with its provenance."""

    kind: DefinitionKind
    name: str
    source_file: Path
    source_text: str
    dependency_names: List[str] = field(default_factory=list)
    span: Optional[Tuple[int, int]] = None  # (start, end) offsets in source_text

    @property
    def definition_text(self) -> str:
        """Return the text of this definition alone, or the whole file if unknown."""
        if self.span is None:
            return self.source_text
        start, end = self.span
        return self.source_text[start:end]


@dataclass
class Node:
    """A graph vertex: lookup id plus the wrapped entity."""

    id: str
    entity: Entity

    @classmethod
    def for_entity(cls, entity: Entity) -> "Node":
        """Build a node, deriving the id from the entity's kind and name."""
        if entity.kind.is_extension:
            return cls(get_extended_id(entity.name), entity)
        return cls(entity.name, entity)


class SchemaGraph:
    """
    A directed graph of schema definitions.

    Nodes are addressed by integer indices handed out in insertion order.
    An edge A -> B means B's definition references A's id (A is depended
    upon by B). Re-adding an existing edge is a no-op. Dependency names that
    matched no node are tracked separately as missing references.
    """

    def __init__(self):
        self._nodes: List[Node] = []
        self._edges: Dict[int, Dict[int, Tuple[int, int]]] = {}  # source -> target -> weight
        self._missing: Dict[int, Set[str]] = {}  # dependent -> unresolved names

    @property
    def nodes(self) -> List[Node]:
        """Return all nodes in index order."""
        return list(self._nodes)

    @property
    def edges(self) -> Dict[int, Set[int]]:
        """Return adjacency list representation of edges."""
        return {k: set(v) for k, v in self._edges.items() if v}

    @property
    def missing(self) -> Dict[int, Set[str]]:
        """Return missing references (dependent index -> unresolved names)."""
        return {k: v.copy() for k, v in self._missing.items()}

    @property
    def duplicates(self) -> Dict[str, List[int]]:
        """Return ids shared by more than one node, with every index using them."""
        seen: Dict[str, List[int]] = {}
        for index, node in enumerate(self._nodes):
            seen.setdefault(node.id, []).append(index)
        return {node_id: indices for node_id, indices in seen.items() if len(indices) > 1}

    def node_indices(self) -> Iterator[int]:
        """Iterate over node indices in insertion order."""
        return iter(range(len(self._nodes)))

    def add_node(self, node: Node) -> int:
        """Add a node and return its index."""
        self._nodes.append(node)
        return len(self._nodes) - 1

    def update_edge(self, source: int, target: int) -> Tuple[int, int]:
        """
        Add a directed edge from source to target unless it already exists.

        Returns:
            The edge weight, the (source, target) pair.
        """
        self._check_index(source)
        self._check_index(target)
        targets = self._edges.setdefault(source, {})
        if target not in targets:
            targets[target] = (source, target)
        return targets[target]

    def edge_weight(self, source: int, target: int) -> Optional[Tuple[int, int]]:
        """Get the weight of an edge, or None if it doesn't exist."""
        return self._edges.get(source, {}).get(target)

    def add_missing(self, index: int, name: str) -> None:
        """Record a dependency name of node ``index`` that matched no node."""
        self._check_index(index)
        self._missing.setdefault(index, set()).add(name)

    def get_missing(self, index: int) -> Set[str]:
        """Get all unresolved dependency names of a node."""
        return self._missing.get(index, set()).copy()

    def has_missing(self) -> bool:
        """Check if there are any missing references."""
        return any(self._missing.values())

    def find_index(self, node_id: str) -> Optional[int]:
        """Return the first node index whose id matches, scanning in index order."""
        for index in self.node_indices():
            if self._nodes[index].id == node_id:
                return index
        return None

    def index_by_id(self) -> Dict[str, int]:
        """
        Map each id to a node index.

        For duplicated ids the first inserted node wins, which matches
        ``find_index``.
        """
        index: Dict[str, int] = {}
        for i, node in enumerate(self._nodes):
            index.setdefault(node.id, i)
        return index

    def get_extended(self, index: int) -> Optional[int]:
        """
        Get the index of the base definition an extension node extends.

        Returns None if the node is not an extension or no base definition
        with the same name exists. Extension nodes are never returned.
        """
        entity = self[index].entity
        if not entity.kind.is_extension:
            return None
        for i, node in enumerate(self._nodes):
            if not node.entity.kind.is_extension and node.id == entity.name:
                return i
        return None

    def get_dependents(self, index: int) -> Set[int]:
        """Get all nodes whose definitions reference the given node."""
        return set(self._edges.get(index, {}))

    def get_dependencies(self, index: int) -> Set[int]:
        """Get all nodes the given node's definition references."""
        return {source for source, targets in self._edges.items() if index in targets}

    def get_roots(self) -> Set[int]:
        """
        Get nodes that depend on no other node.

        These are leaf definitions (enums, scalars, types referencing only
        unknown names) that everything else builds on.
        """
        all_targets: Set[int] = set()
        for targets in self._edges.values():
            all_targets.update(targets)
        return set(self.node_indices()) - all_targets

    def iter_edges(self) -> Iterator[Tuple[int, int]]:
        """Iterate over all edges as (source, target) tuples."""
        for source in sorted(self._edges):
            for target in sorted(self._edges[source]):
                yield source, target

    def iter_missing(self) -> Iterator[Tuple[int, str]]:
        """Iterate over all missing references as (dependent, name) tuples."""
        for index in sorted(self._missing):
            for name in sorted(self._missing[index]):
                yield index, name

    def get_connected_nodes(self) -> Set[int]:
        """
        Get nodes that take part in at least one edge or missing reference.
        """
        connected: Set[int] = set()
        for source, targets in self._edges.items():
            if targets:
                connected.add(source)
                connected.update(targets)
        for index, names in self._missing.items():
            if names:
                connected.add(index)
        return connected

    def edge_count(self) -> int:
        return sum(len(t) for t in self._edges.values())

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._nodes):
            raise IndexError(f"No node with index {index}")

    def __getitem__(self, index: int) -> Node:
        self._check_index(index)
        return self._nodes[index]

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        """Check if a node with the given id is in the graph."""
        return any(node.id == node_id for node in self._nodes)

    def __repr__(self) -> str:
        missing_count = sum(len(m) for m in self._missing.values())
        return f"SchemaGraph(nodes={len(self._nodes)}, edges={self.edge_count()}, missing={missing_count})"
