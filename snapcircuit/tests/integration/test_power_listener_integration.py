"""
End-to-end scenarios: every mutation flows through cycle detection and
power propagation to the per-component listeners and observers.
"""

import pytest
from snapcircuit.controllers.circuit_controller import CircuitController
from snapcircuit.models.component import ComponentType
from snapcircuit.tests.conftest import EventLog, PowerLog


@pytest.fixture
def watched():
    """Controller with a PowerLog slot for each id in ``logs``."""
    controller = CircuitController()
    logs = {}

    def watch(*ids):
        for cid in ids:
            logs[cid] = PowerLog()
            controller.register_power_listener(cid, logs[cid])
        return logs

    return controller, watch


class TestScenarios:
    def test_battery_triangle_powers_every_member(self, watched):
        controller, watch = watched
        logs = watch("B1", "L1", "M1")
        controller.register_component("B1", ComponentType.BATTERY)
        controller.register_component("L1", ComponentType.LED)
        controller.register_component("M1", ComponentType.MOTOR)
        controller.add_connection("B1", "L1")
        controller.add_connection("L1", "M1")
        assert all(log.calls == 0 for log in logs.values())
        controller.add_connection("M1", "B1")
        assert {cid: log.values for cid, log in logs.items()} == {"B1": [True], "L1": [True], "M1": [True]}

    def test_switch_gates_power(self, switched_loop):
        log = PowerLog()
        switched_loop.register_power_listener("L1", log)
        switched_loop.set_switch_state("S1", True)
        switched_loop.set_switch_state("S1", False)
        switched_loop.set_switch_state("S1", True)
        assert log.values == [True, False, True]

    def test_open_path_never_powered(self, watched):
        controller, watch = watched
        logs = watch("B1", "L1", "M1")
        controller.register_component("B1", ComponentType.BATTERY)
        controller.add_connection("B1", "L1")
        controller.add_connection("L1", "M1")
        assert controller.powered_components() == []
        assert all(log.calls == 0 for log in logs.values())

    def test_disjoint_cycles_are_independent(self, watched):
        controller, watch = watched
        logs = watch("L1", "L2")
        controller.register_component("B1", ComponentType.BATTERY)
        controller.register_component("S2", ComponentType.SWITCH)
        for a, b in (("B1", "L1"), ("L1", "W1"), ("W1", "B1")):
            controller.add_connection(a, b)
        controller.register_component("B2", ComponentType.BATTERY)
        for a, b in (("B2", "S2"), ("S2", "L2"), ("L2", "B2")):
            controller.add_connection(a, b)
        assert logs["L1"].values == [True]
        assert logs["L2"].values == []
        controller.set_switch_state("S2", True)
        assert logs["L1"].values == [True]
        assert logs["L2"].values == [True]

    def test_self_connection_changes_nothing(self, battery_triangle):
        events = EventLog()
        log = PowerLog()
        battery_triangle.add_observer(events)
        battery_triangle.register_power_listener("L1", log)
        before = battery_triangle.power_map
        assert battery_triangle.add_connection("L1", "L1") is False
        assert battery_triangle.power_map == before
        assert events.events == []
        assert log.calls == 0

    def test_unregister_breaks_dependent_cycle(self, battery_triangle):
        log = PowerLog()
        battery_triangle.register_power_listener("B1", log)
        battery_triangle.unregister_component("L1")
        assert log.values == [False]
        assert battery_triangle.get_powered("L1") is False
        assert battery_triangle.get_component("L1") is None

    def test_double_add_is_idempotent(self, battery_triangle):
        log = PowerLog()
        battery_triangle.register_power_listener("M1", log)
        battery_triangle.add_connection("B1", "L1")
        battery_triangle.register_component("M1", ComponentType.MOTOR)
        assert len(battery_triangle.model.graph.connections) == 3
        assert len(battery_triangle.find_cycles()) == 1
        assert log.calls == 0

    def test_component_on_two_cycles_stays_powered_when_one_breaks(self, watched):
        controller, watch = watched
        logs = watch("L1")
        controller.register_component("B1", ComponentType.BATTERY)
        # Two parallel branches through L1: via W1 and via W2
        for a, b in (("B1", "L1"), ("L1", "W1"), ("W1", "B1"), ("L1", "W2"), ("W2", "B1")):
            controller.add_connection(a, b)
        controller.remove_connection("W1", "B1")
        assert controller.get_powered("L1") is True
        assert controller.get_powered("W1") is False
        assert logs["L1"].values == [True]

    def test_observer_sees_structure_before_power(self, controller):
        events = EventLog()
        controller.add_observer(events)
        controller.register_component("B1", ComponentType.BATTERY)
        controller.add_connection("B1", "L1")
        names = [e for e, _ in events.events]
        assert names == [
            "component_registered", "power_recomputed",
            "component_registered", "connection_added", "power_recomputed",
        ]

    def test_reset_then_rebuild(self, battery_triangle):
        log = PowerLog()
        battery_triangle.register_power_listener("L1", log)
        battery_triangle.reset_graph()
        battery_triangle.register_component("B1", ComponentType.BATTERY)
        battery_triangle.add_connection("B1", "L1")
        battery_triangle.add_connection("L1", "X")
        battery_triangle.add_connection("X", "B1")
        assert log.values == [False, True]
