"""
CircuitModel - Central data store for circuit state.

Holds the graph store, the component registry and the most recently
computed power map. The model performs no recomputation itself; the
CircuitController drives that after every mutation.
"""

from dataclasses import dataclass, field

from .component import ComponentData, ComponentId
from .graph import CircuitGraph
from .registry import ComponentRegistry


@dataclass
class CircuitModel:
    """
    Central data store holding all circuit state.

    ``powered`` always has one entry per component in ``graph``.
    """

    graph: CircuitGraph = field(default_factory=CircuitGraph)
    registry: ComponentRegistry = field(default_factory=ComponentRegistry)
    powered: dict[ComponentId, bool] = field(default_factory=dict)

    @property
    def components(self) -> dict[ComponentId, ComponentData]:
        """Registered components in graph order."""
        return {cid: self.registry.ensure(cid) for cid in self.graph.component_ids}

    def is_registered(self, component_id: str) -> bool:
        return self.graph.has_component(component_id)

    def clear(self) -> None:
        """Reset to an empty circuit."""
        self.graph.clear()
        self.registry.clear()
        self.powered.clear()

    def to_dict(self) -> dict:
        """Serialize to the circuit file format (without events)."""
        return {
            "components": [self.registry.ensure(cid).to_dict() for cid in self.graph.component_ids],
            "connections": sorted(c.to_list() for c in self.graph.connections),
        }
