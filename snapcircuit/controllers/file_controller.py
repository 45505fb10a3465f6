"""
FileController - Reads circuit descriptions and event scripts.

Circuit files describe a starting topology (components, switch states,
connections) and an optional list of events to replay against it. They
are inputs for tooling and tests; circuit state is never written back.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from snapcircuit.controllers.circuit_controller import CircuitController
from snapcircuit.models.component import ComponentType
from snapcircuit.settings import CircuitSettings

logger = logging.getLogger(__name__)

# Event op -> required fields
EVENT_FIELDS = {
    "connect": ("a", "b"),
    "disconnect": ("a", "b"),
    "disconnect_all": ("id",),
    "set_switch": ("id", "closed"),
    "toggle_switch": ("id",),
    "register": ("id",),
    "unregister": ("id",),
    "reset": (),
}


def validate_circuit_data(data) -> None:
    """
    Validate JSON structure before loading.

    Raises ValueError with a descriptive message if anything is wrong.
    """
    if not isinstance(data, dict):
        raise ValueError("File does not contain a valid circuit object.")

    components = data.get("components", [])
    connections = data.get("connections", [])
    events = data.get("events", [])
    if not isinstance(components, list):
        raise ValueError("Invalid 'components' list.")
    if not isinstance(connections, list):
        raise ValueError("Invalid 'connections' list.")
    if not isinstance(events, list):
        raise ValueError("Invalid 'events' list.")

    comp_ids = set()
    for i, comp in enumerate(components):
        if not isinstance(comp, dict) or "id" not in comp:
            raise ValueError(f"Component #{i + 1} is missing required field 'id'.")
        if not isinstance(comp["id"], str) or not comp["id"].strip():
            raise ValueError(f"Component #{i + 1} has an empty or non-string id.")
        if comp["id"] in comp_ids:
            raise ValueError(f"Component '{comp['id']}' is declared more than once.")
        try:
            ComponentType.from_name(comp.get("type", "Other"))
        except ValueError as e:
            raise ValueError(f"Component '{comp['id']}': {e}") from e
        if "closed" in comp and not isinstance(comp["closed"], bool):
            raise ValueError(f"Component '{comp['id']}' field 'closed' must be true or false.")
        comp_ids.add(comp["id"])

    for i, pair in enumerate(connections):
        if not isinstance(pair, list) or len(pair) != 2 or not all(isinstance(p, str) for p in pair):
            raise ValueError(f"Connection #{i + 1} must be a list of two component ids.")

    for i, event in enumerate(events):
        _check_event(event, f"Event #{i + 1}")


def _check_event(event, label: str) -> None:
    """Raise ValueError unless ``event`` is a well-formed event script entry."""
    if not isinstance(event, dict) or "op" not in event:
        raise ValueError(f"{label} is missing required field 'op'.")
    op = event["op"]
    if op not in EVENT_FIELDS:
        raise ValueError(f"{label} has unknown op '{op}'. Valid ops: {', '.join(EVENT_FIELDS)}")
    for key in EVENT_FIELDS[op]:
        if key not in event:
            raise ValueError(f"{label} ({op}) is missing required field '{key}'.")
    for key in ("id", "a", "b"):
        if key in event and (not isinstance(event[key], str) or not event[key].strip()):
            raise ValueError(f"{label} ({op}) field '{key}' must be a non-empty string.")
    if "closed" in event and not isinstance(event["closed"], bool):
        raise ValueError(f"{label} ({op}) field 'closed' must be true or false.")
    if "type" in event:
        try:
            ComponentType.from_name(event["type"])
        except ValueError as e:
            raise ValueError(f"{label} ({op}): {e}") from e
    if "label" in event and event["label"] is not None and not isinstance(event["label"], str):
        raise ValueError(f"{label} ({op}) field 'label' must be a string.")


def read_circuit_file(filepath) -> dict:
    """
    Read and validate a circuit JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or fails validation.
    """
    path = Path(filepath)
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON in {path}: {e}") from e
    validate_circuit_data(data)
    return data


def apply_circuit_data(controller: CircuitController, data: dict) -> None:
    """Build the topology described by ``data`` through the public operations."""
    for comp in data.get("components", []):
        controller.register_component(comp["id"], comp.get("type", "Other"), comp.get("label"))
        if "closed" in comp:
            controller.set_switch_state(comp["id"], comp["closed"])
    for a, b in data.get("connections", []):
        controller.add_connection(a, b)


def apply_event(controller: CircuitController, event: dict) -> None:
    """
    Execute one scripted event against the controller.

    Raises:
        ValueError: If the event is malformed.
    """
    _check_event(event, "Event")
    op = event["op"]
    if op == "connect":
        controller.add_connection(event["a"], event["b"])
    elif op == "disconnect":
        controller.remove_connection(event["a"], event["b"])
    elif op == "disconnect_all":
        controller.remove_all_connections(event["id"])
    elif op == "set_switch":
        controller.set_switch_state(event["id"], event["closed"])
    elif op == "toggle_switch":
        controller.toggle_switch(event["id"])
    elif op == "register":
        controller.register_component(event["id"], event.get("type", "Other"), event.get("label"))
    elif op == "unregister":
        controller.unregister_component(event["id"])
    elif op == "reset":
        controller.reset_graph()


class FileController:
    """
    Loads circuit files into a CircuitController.

    Keeps the path of the last loaded file and its pending events so a
    caller can replay them one at a time.
    """

    def __init__(self, controller: Optional[CircuitController] = None,
                 settings: Optional[CircuitSettings] = None):
        self.controller = controller or CircuitController(settings=settings)
        self.current_file: Optional[Path] = None
        self.events: list[dict] = []

    def load_circuit(self, filepath) -> None:
        """
        Replace the controller's circuit with the one in ``filepath``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file content is invalid.
        """
        data = read_circuit_file(filepath)
        self.controller.reset_graph()
        apply_circuit_data(self.controller, data)
        self.current_file = Path(filepath)
        self.events = list(data.get("events", []))
        logger.info(
            "Loaded %s: %d component(s), %d connection(s), %d event(s)",
            self.current_file.name,
            len(self.controller.model.graph.components),
            len(self.controller.model.graph.connections),
            len(self.events),
        )

    def replay_events(self) -> int:
        """Apply every pending event in order. Returns the number applied."""
        count = 0
        while self.events:
            apply_event(self.controller, self.events.pop(0))
            count += 1
        return count
