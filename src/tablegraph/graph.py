"""Graph algorithms and traversal utilities."""
from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from graphlib import TopologicalSorter
from typing import TYPE_CHECKING

from .logger import logger
from .model import Direction, TableDependency

if TYPE_CHECKING:
    from .repository import TableRepository

__all__ = [
    "transitive_closure",
    "transitive_dependencies",
    "transitive_successors",
    "lineage_order",
]

FetchEdges = Callable[[str], Iterable[TableDependency]]


def transitive_closure(
    root: str, fetch_edges: FetchEdges, direction: Direction
) -> list[TableDependency]:
    """Return every edge transitively reachable from ``root``.

    Edges are expanded depth first in the order ``fetch_edges`` yields them.
    Each reachable table contributes exactly the first edge through which it
    was discovered; edges leading back to ``root`` or to an already visited
    table are dropped. ``fetch_edges`` is called once per visited table and
    any exception it raises aborts the walk.
    """
    found: dict[str, TableDependency] = {}
    visited = {root}
    stack: list[Iterator[TableDependency]] = [iter(fetch_edges(root))]
    while stack:
        edge = next(stack[-1], None)
        if edge is None:
            stack.pop()
            continue
        target = edge.target(direction)
        if target in visited:
            continue
        found[target] = edge
        visited.add(target)
        stack.append(iter(fetch_edges(target)))
    logger.debug(
        "closure of {} ({}): {} edges", root, direction.value, len(found)
    )
    return list(found.values())


def transitive_dependencies(
    repository: "TableRepository", fqdn: str
) -> list[TableDependency]:
    """Closure over the tables ``fqdn`` reads from."""

    def fetch(name: str) -> list[TableDependency]:
        return repository.get_by_fqdn(name).dependencies

    return transitive_closure(fqdn, fetch, Direction.DEPENDS_ON)


def transitive_successors(
    repository: "TableRepository", fqdn: str
) -> list[TableDependency]:
    """Closure over the tables that read from ``fqdn``."""

    def fetch(name: str) -> list[TableDependency]:
        repository.get_by_fqdn(name)
        return repository.find_successors(name)

    return transitive_closure(fqdn, fetch, Direction.SUCCESSOR_OF)


def lineage_order(edges: Iterable[TableDependency]) -> list[str]:
    """Return the tables of ``edges`` in topological order.

    Dependencies come before the tables that read from them, so the result
    can be rendered left to right as a lineage graph.
    """
    graph: dict[str, list[str]] = {}
    for edge in edges:
        graph.setdefault(edge.fqdn, []).append(edge.dependency_fqdn)
        graph.setdefault(edge.dependency_fqdn, [])
    return list(TopologicalSorter(graph).static_order())
