"""
Shared test fixtures for the snapcircuit test suite.

All fixtures build plain model and controller objects; nothing touches
the user's real settings file.
"""

import json

import pytest
from snapcircuit.controllers.circuit_controller import CircuitController
from snapcircuit.models.component import ComponentType
from snapcircuit.models.graph import CircuitGraph


class EventLog:
    """Simple observer that records (event, data) tuples."""

    def __init__(self):
        self.events = []

    def __call__(self, event, data):
        self.events.append((event, data))

    def count(self, event_name):
        return sum(1 for e, _ in self.events if e == event_name)

    def last(self):
        return self.events[-1] if self.events else None

    def clear(self):
        self.events.clear()


class PowerLog:
    """Power listener that records every value it receives."""

    def __init__(self):
        self.values = []

    def __call__(self, powered):
        self.values.append(powered)

    @property
    def calls(self):
        return len(self.values)


def make_graph(*pairs):
    """Build a CircuitGraph from (a, b) pairs."""
    graph = CircuitGraph()
    for a, b in pairs:
        graph.add_connection(a, b)
    return graph


@pytest.fixture
def controller():
    return CircuitController()


@pytest.fixture
def events(controller):
    """EventLog attached to the controller fixture."""
    log = EventLog()
    controller.add_observer(log)
    return log


@pytest.fixture
def battery_triangle(controller):
    """
    B1(Battery) -- L1(LED) -- M1(Motor) -- B1

    Every component is powered.
    """
    controller.register_component("B1", ComponentType.BATTERY)
    controller.register_component("L1", ComponentType.LED)
    controller.register_component("M1", ComponentType.MOTOR)
    controller.add_connection("B1", "L1")
    controller.add_connection("L1", "M1")
    controller.add_connection("M1", "B1")
    return controller


@pytest.fixture
def switched_loop(controller):
    """
    B1(Battery) -- S1(Switch, open) -- L1(LED) -- B1

    Nothing is powered until S1 closes.
    """
    controller.register_component("B1", ComponentType.BATTERY)
    controller.register_component("S1", ComponentType.SWITCH)
    controller.register_component("L1", ComponentType.LED)
    controller.add_connection("B1", "S1")
    controller.add_connection("S1", "L1")
    controller.add_connection("L1", "B1")
    return controller


@pytest.fixture
def circuit_file(tmp_path):
    """Write a circuit JSON document and return its path as a string."""

    def _write(data, name="circuit.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    return _write


@pytest.fixture
def switched_loop_data():
    return {
        "components": [
            {"id": "B1", "type": "Battery"},
            {"id": "S1", "type": "Switch", "closed": False},
            {"id": "L1", "type": "LED"},
        ],
        "connections": [["B1", "S1"], ["S1", "L1"], ["L1", "B1"]],
        "events": [
            {"op": "set_switch", "id": "S1", "closed": True},
            {"op": "disconnect", "a": "L1", "b": "B1"},
        ],
    }
