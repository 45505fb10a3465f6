"""
CircuitGraph - Graph store for component ids and undirected connections.

This module holds data and structural mutation only. Cycle detection
and power propagation live in the simulation package.
"""

import logging
from dataclasses import dataclass, field

from .component import ComponentId
from .connection import ConnectionData

logger = logging.getLogger(__name__)


class GraphInvariantError(Exception):
    """Raised when the graph store is found in an inconsistent state."""


@dataclass
class CircuitGraph:
    """
    Registered component ids plus the set of connections between them.

    ``components`` keeps registration order (dict insertion order), which
    the cycle detector uses to make its traversal deterministic.
    ``adjacency`` mirrors ``connections`` for O(1) neighbour lookups.
    """

    components: dict[ComponentId, None] = field(default_factory=dict)
    connections: set[ConnectionData] = field(default_factory=set)
    adjacency: dict[ComponentId, set[ComponentId]] = field(default_factory=dict)

    # --- Component operations ---

    def add_component(self, component_id: str) -> bool:
        """Insert a component id. Returns False if it was already present."""
        component_id = ComponentId(component_id)
        if component_id in self.components:
            return False
        self.components[component_id] = None
        self.adjacency[component_id] = set()
        return True

    def remove_component(self, component_id: str) -> list[ConnectionData]:
        """
        Remove a component and every connection touching it.

        Returns:
            The connections that were removed (empty if the id is unknown).
        """
        if component_id not in self.components:
            return []
        removed = self.remove_all_connections(component_id)
        del self.components[component_id]
        del self.adjacency[component_id]
        return removed

    def has_component(self, component_id: str) -> bool:
        return component_id in self.components

    @property
    def component_ids(self) -> list[ComponentId]:
        """Component ids in registration order."""
        return list(self.components)

    # --- Connection operations ---

    def add_connection(self, a: str, b: str) -> bool:
        """
        Connect two components, creating either endpoint if it is missing.

        Self-connections and duplicates are ignored.

        Returns:
            True if a new connection was inserted.
        """
        if a == b:
            logger.debug("Ignoring self-connection on '%s'", a)
            return False
        self.add_component(a)
        self.add_component(b)
        connection = ConnectionData.between(a, b)
        if connection in self.connections:
            return False
        self.connections.add(connection)
        self.adjacency[connection.first].add(connection.second)
        self.adjacency[connection.second].add(connection.first)
        return True

    def remove_connection(self, a: str, b: str) -> bool:
        """Remove the connection {a, b}. Returns False if it did not exist."""
        if a == b:
            return False
        connection = ConnectionData.between(a, b)
        if connection not in self.connections:
            return False
        self._drop(connection)
        return True

    def remove_all_connections(self, component_id: str) -> list[ConnectionData]:
        """Remove every connection with an endpoint equal to ``component_id``."""
        removed = self.connections_of(component_id)
        for connection in removed:
            self._drop(connection)
        return removed

    def has_connection(self, a: str, b: str) -> bool:
        if a == b:
            return False
        return ConnectionData.between(a, b) in self.connections

    def connections_of(self, component_id: str) -> list[ConnectionData]:
        """Connections touching a component, sorted for stable output."""
        return sorted(
            (c for c in self.connections if c.connects_component(component_id)),
            key=lambda c: (c.first, c.second),
        )

    def neighbors(self, component_id: str) -> set[ComponentId]:
        """Ids directly connected to ``component_id`` (empty if unknown)."""
        return set(self.adjacency.get(component_id, ()))

    def _drop(self, connection: ConnectionData) -> None:
        self.connections.discard(connection)
        self.adjacency[connection.first].discard(connection.second)
        self.adjacency[connection.second].discard(connection.first)

    # --- Graph operations ---

    def clear(self) -> None:
        """Remove all components and connections."""
        self.components.clear()
        self.connections.clear()
        self.adjacency.clear()

    def check_invariants(self) -> None:
        """
        Verify the structural invariants of the store.

        Raises:
            GraphInvariantError: On a self-edge, a dangling endpoint, or an
                adjacency map that disagrees with the connection set.
        """
        edge_count = 0
        for connection in self.connections:
            if connection.first == connection.second:
                raise GraphInvariantError(f"Self-connection stored for '{connection.first}'")
            for endpoint in connection.endpoints():
                if endpoint not in self.components:
                    raise GraphInvariantError(f"{connection!r} references unregistered component '{endpoint}'")
            if connection.second not in self.adjacency[connection.first] or (
                connection.first not in self.adjacency[connection.second]
            ):
                raise GraphInvariantError(f"Adjacency is missing {connection!r}")
        for component_id, neighbours in self.adjacency.items():
            if component_id not in self.components:
                raise GraphInvariantError(f"Adjacency entry for unregistered component '{component_id}'")
            if component_id in neighbours:
                raise GraphInvariantError(f"Self-loop in adjacency for '{component_id}'")
            edge_count += len(neighbours)
        # Each undirected connection appears twice in the adjacency map
        if edge_count != 2 * len(self.connections):
            raise GraphInvariantError(
                f"Adjacency holds {edge_count} half-edges for {len(self.connections)} connections"
            )

    def describe(self) -> str:
        """Single-line dump of the connection list for debug logging."""
        pairs = sorted(c.to_list() for c in self.connections)
        return "Connections: " + ", ".join(f"{a}-{b}" for a, b in pairs) if pairs else "Connections: (none)"

    def to_dict(self) -> dict:
        return {
            "components": [str(cid) for cid in self.components],
            "connections": sorted(c.to_list() for c in self.connections),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CircuitGraph":
        graph = cls()
        for component_id in data.get("components", []):
            graph.add_component(component_id)
        for pair in data.get("connections", []):
            connection = ConnectionData.from_list(pair)
            graph.add_connection(connection.first, connection.second)
        return graph
