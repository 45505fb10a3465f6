"""
Circuit - high-level scripting API for programmatic circuit manipulation.

Wraps the model/controller layers behind a small interface for
headless workflows and the interactive REPL.
"""

from pathlib import Path
from typing import Callable, Optional, Union

from snapcircuit.controllers.circuit_controller import CircuitController
from snapcircuit.controllers.file_controller import FileController
from snapcircuit.controllers.power_dispatcher import ListenerToken
from snapcircuit.models.component import COMPONENT_TYPES, ComponentType
from snapcircuit.settings import CircuitSettings
from snapcircuit.simulation.power_propagator import qualifying_cycles


class Circuit:
    """A scriptable circuit that can be built and inspected programmatically.

    Args:
        controller: An existing CircuitController to wrap. If None, creates
            an empty circuit.
        settings: Settings for a newly created controller.
    """

    component_types = COMPONENT_TYPES

    def __init__(self, controller: Optional[CircuitController] = None,
                 settings: Optional[CircuitSettings] = None):
        self._controller = controller or CircuitController(settings=settings)
        self._files: Optional[FileController] = None

    @classmethod
    def load(cls, path: Union[str, Path], settings: Optional[CircuitSettings] = None) -> "Circuit":
        """Load a circuit from a JSON file.

        Events listed in the file are not applied; use :meth:`replay` for that.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the JSON is malformed or fails validation.
        """
        circuit = cls(settings=settings)
        files = FileController(circuit._controller)
        files.load_circuit(path)
        circuit._files = files
        return circuit

    @property
    def controller(self) -> CircuitController:
        return self._controller

    # --- Building ---

    def add(self, component_id: str, component_type: Union[ComponentType, str] = "Other",
            closed: Optional[bool] = None) -> "Circuit":
        """Register a component. Returns self so calls can be chained."""
        self._controller.register_component(component_id, component_type)
        if closed is not None:
            self._controller.set_switch_state(component_id, closed)
        return self

    def remove(self, component_id: str) -> "Circuit":
        self._controller.unregister_component(component_id)
        return self

    def connect(self, *component_ids: str) -> "Circuit":
        """Connect consecutive ids: ``connect("B1", "L1", "S1")`` makes B1-L1 and L1-S1."""
        for a, b in zip(component_ids, component_ids[1:]):
            self._controller.add_connection(a, b)
        return self

    def loop(self, *component_ids: str) -> "Circuit":
        """Connect the ids in order and close the loop back to the first."""
        self.connect(*component_ids)
        if len(component_ids) > 2:
            self._controller.add_connection(component_ids[-1], component_ids[0])
        return self

    def disconnect(self, a: str, b: str) -> "Circuit":
        self._controller.remove_connection(a, b)
        return self

    def close(self, switch_id: str) -> "Circuit":
        self._controller.set_switch_state(switch_id, True)
        return self

    def open(self, switch_id: str) -> "Circuit":
        self._controller.set_switch_state(switch_id, False)
        return self

    def toggle(self, switch_id: str) -> Optional[bool]:
        return self._controller.toggle_switch(switch_id)

    def reset(self) -> "Circuit":
        self._controller.reset_graph()
        return self

    def replay(self) -> int:
        """Apply the events from the file this circuit was loaded from."""
        if self._files is None:
            return 0
        return self._files.replay_events()

    # --- Inspection ---

    def is_powered(self, component_id: str) -> bool:
        return self._controller.get_powered(component_id)

    @property
    def power_map(self) -> dict[str, bool]:
        return self._controller.power_map

    def cycles(self, qualifying_only: bool = False) -> list[tuple]:
        cycles = self._controller.find_cycles()
        if qualifying_only:
            return qualifying_cycles(cycles, self._controller.model.registry)
        return cycles

    def on_power(self, component_id: str, callback: Callable[[bool], None]) -> ListenerToken:
        """Subscribe to power changes for one component."""
        return self._controller.register_power_listener(component_id, callback)

    def to_dict(self) -> dict:
        return self._controller.model.to_dict()

    def __repr__(self) -> str:
        graph = self._controller.model.graph
        powered = len(self._controller.powered_components())
        return (
            f"Circuit({len(graph.components)} components, "
            f"{len(graph.connections)} connections, {powered} powered)"
        )
