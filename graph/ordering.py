"""Dependency-first ordering of graph nodes."""

import heapq
from typing import Dict, List, Set, Tuple

from .model import SchemaGraph


def topological_order(graph: SchemaGraph) -> List[int]:
    """
    Order node indices so every definition follows the ones it references.

    A type extension also follows the definition it extends, although that
    link is not an edge of the graph.

    Ready nodes are taken by (id, index) so the result does not depend on
    file processing order. Nodes caught in a cycle can't be ordered; they
    are appended at the end, also by (id, index). Self-loops are ignored.

    Args:
        graph: The schema graph.

    Returns:
        Every node index exactly once.
    """
    successors: Dict[int, Set[int]] = {index: set() for index in graph.node_indices()}
    for source, target in graph.iter_edges():
        if source != target:
            successors[source].add(target)
    for index in graph.node_indices():
        base = graph.get_extended(index)
        if base is not None:
            successors[base].add(index)

    in_degree: Dict[int, int] = {index: 0 for index in successors}
    for targets in successors.values():
        for target in targets:
            in_degree[target] += 1

    ready: List[Tuple[str, int]] = [
        (graph[index].id, index) for index, degree in in_degree.items() if degree == 0
    ]
    heapq.heapify(ready)

    order: List[int] = []
    while ready:
        _, index = heapq.heappop(ready)
        order.append(index)
        for successor in successors[index]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                heapq.heappush(ready, (graph[successor].id, successor))

    if len(order) < len(graph):
        placed = set(order)
        remaining = sorted(
            (graph[index].id, index) for index in graph.node_indices() if index not in placed
        )
        order.extend(index for _, index in remaining)

    return order
