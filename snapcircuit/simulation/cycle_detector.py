"""
simulation/cycle_detector.py

Simple-cycle enumeration over the connection graph.

Each cycle is reported once per component set: two cycles that visit
the same components (in any rotation, direction, or order) count as
one. Circuits built in a scene have tens of components, so a full
depth-first enumeration is affordable and keeps the result independent
of the order components were registered in.

The running time grows with the number of simple cycles, which is
exponential in the size of densely meshed graphs: a 5x5 grid of
components already has several thousand cycles and takes a noticeable
fraction of a second per recompute. Keep circuits to a few dozen
sparsely connected components.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from snapcircuit.models.component import ComponentId
from snapcircuit.models.graph import CircuitGraph

logger = logging.getLogger(__name__)

Cycle = tuple[ComponentId, ...]


def cycle_key(cycle) -> tuple[str, ...]:
    """Canonical key of a cycle: its component ids in sorted order."""
    return tuple(sorted(cycle))


@dataclass
class _Traversal:
    """Worklist state for the search rooted at one start component."""

    start: ComponentId
    path: list[ComponentId] = field(default_factory=list)
    on_path: set[ComponentId] = field(default_factory=set)
    frames: list[Iterator[ComponentId]] = field(default_factory=list)

    def push(self, component_id: ComponentId, neighbours: list[ComponentId]) -> None:
        self.path.append(component_id)
        self.on_path.add(component_id)
        self.frames.append(iter(neighbours))

    def pop(self) -> None:
        self.frames.pop()
        self.on_path.discard(self.path.pop())


def _ordered_neighbours(graph: CircuitGraph, component_id: ComponentId,
                        rank: dict[ComponentId, int]) -> list[ComponentId]:
    return sorted(graph.neighbors(component_id), key=rank.__getitem__)


def _cycles_from(graph: CircuitGraph, start: ComponentId,
                 rank: dict[ComponentId, int]) -> Iterator[Cycle]:
    """
    Yield every simple cycle whose lowest-ranked component is ``start``.

    The path is only extended through components ranked above ``start``,
    so a cycle is found only from its lowest-ranked member. Each cycle
    is walked in both directions; only the direction whose second
    component ranks below its last component is yielded.
    """
    start_rank = rank[start]
    traversal = _Traversal(start=start)
    traversal.push(start, _ordered_neighbours(graph, start, rank))

    while traversal.frames:
        neighbour = next(traversal.frames[-1], None)
        if neighbour is None:
            traversal.pop()
            continue

        if neighbour == start:
            path = traversal.path
            if len(path) >= 3 and rank[path[1]] < rank[path[-1]]:
                yield tuple(path)
            continue

        if rank[neighbour] < start_rank or neighbour in traversal.on_path:
            continue

        traversal.push(neighbour, _ordered_neighbours(graph, neighbour, rank))


def find_cycles(graph: CircuitGraph) -> list[Cycle]:
    """
    Enumerate the simple cycles of a connection graph.

    Args:
        graph: The graph store to search.

    Returns:
        One cycle (a tuple of at least three component ids, consecutive
        ids connected and the last connected back to the first) for each
        distinct set of components that forms a cycle. The order of the
        returned cycles is not meaningful.
    """
    rank = {cid: index for index, cid in enumerate(graph.component_ids)}
    seen: set[tuple[str, ...]] = set()
    cycles: list[Cycle] = []

    for start in graph.component_ids:
        # A component with fewer than two connections cannot be on a cycle
        if len(graph.adjacency.get(start, ())) < 2:
            continue
        for cycle in _cycles_from(graph, start, rank):
            key = cycle_key(cycle)
            if key in seen:
                continue
            seen.add(key)
            cycles.append(cycle)

    logger.debug("Found %d cycle(s) across %d component(s)", len(cycles), len(rank))
    return cycles
