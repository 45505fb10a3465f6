"""
CircuitController - The circuit-state context.

Owns one CircuitModel and one PowerDispatcher. Every public mutation
runs to completion before returning:

    graph edit -> cycle detection -> power propagation -> notification

so ``power_map`` and ``get_powered`` are always consistent with the
graph and switch states. Views and other collaborators register
callbacks to stay in sync; nothing here knows about scenes or rendering.
"""

import logging
from typing import Any, Callable, Optional, Union

from snapcircuit.controllers.power_dispatcher import (
    CircuitReentryError,
    ListenerToken,
    PowerDispatcher,
    PowerListener,
)
from snapcircuit.models.circuit import CircuitModel
from snapcircuit.models.component import ComponentData, ComponentId, ComponentType
from snapcircuit.models.connection import ConnectionData
from snapcircuit.settings import CircuitSettings
from snapcircuit.simulation.cycle_detector import Cycle, find_cycles
from snapcircuit.simulation.power_propagator import propagate_power

logger = logging.getLogger(__name__)

Event = tuple[str, Any]


class CircuitController:
    """
    Controller for circuit topology, switch state and power listeners.

    Power listeners (one per component id) receive a bool whenever that
    component's energized value changes. Observers receive every event.

    Observer events:
        component_registered (ComponentData) - A component was created or retyped
        component_unregistered (str) - A component was removed (by ID)
        connection_added (ConnectionData) - A new connection was made
        connection_removed (ConnectionData) - A connection was broken
        switch_changed (tuple[str, bool]) - A switch opened or closed
        graph_reset (None) - The entire circuit was cleared
        power_recomputed (dict[str, bool]) - A fresh power map was computed
    """

    def __init__(self, model: Optional[CircuitModel] = None,
                 settings: Optional[CircuitSettings] = None):
        self.model = model or CircuitModel()
        self.settings = settings or CircuitSettings()
        self.dispatcher = PowerDispatcher()
        self._observers: list[Callable[[str, Any], None]] = []
        self._cycles: list[Cycle] = []
        self._notifying = False
        for component_id in self.model.graph.component_ids:
            self.model.registry.ensure(component_id)
        self._recompute()

    # --- Observers ---

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for model change events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Unregister a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> Optional[CircuitReentryError]:
        """
        Notify all observers of a model change.

        Returns the first CircuitReentryError an observer raised, if any,
        once every observer has been called.
        """
        reentry = None
        for observer in list(self._observers):
            try:
                observer(event, data)
            except CircuitReentryError as e:
                logger.error("Observer mutated the circuit during '%s'", event)
                if reentry is None:
                    reentry = e
            except (TypeError, AttributeError, RuntimeError, ValueError) as e:
                logger.error("Error notifying observer: %s", e)
        return reentry

    def _guard(self, operation: str) -> None:
        if self._notifying:
            raise CircuitReentryError(
                f"{operation}() called while notifying listeners; defer the mutation until the call returns"
            )

    # --- Component operations ---

    def register_component(self, component_id: str,
                           component_type: Union[ComponentType, str] = ComponentType.OTHER,
                           label: Optional[str] = None) -> ComponentData:
        """
        Create or update a component entry.

        Registering an existing id updates its type (and label, if given)
        without touching its connections or switch state.

        Raises:
            ValueError: If ``component_type`` is a string naming no known type.
        """
        self._guard("register_component")
        if not isinstance(component_type, ComponentType):
            component_type = ComponentType.from_name(component_type)
        self.model.graph.add_component(component_id)
        component = self.model.registry.register(component_id, component_type, label)
        logger.debug("Registered %r", component)
        self._recompute([("component_registered", component)])
        return component

    def unregister_component(self, component_id: str) -> None:
        """Remove a component, its connections, and its listener slot."""
        self._guard("unregister_component")
        registered = self.model.graph.has_component(component_id)
        removed = self.model.graph.remove_component(component_id)
        self.model.registry.remove(component_id)
        self.dispatcher.forget(component_id)
        if not registered:
            logger.debug("unregister_component: '%s' is not registered", component_id)
            return
        events: list[Event] = [("connection_removed", c) for c in removed]
        events.append(("component_unregistered", component_id))
        self._recompute(events)

    def get_component(self, component_id: str) -> Optional[ComponentData]:
        if not self.model.graph.has_component(component_id):
            return None
        return self.model.registry.get(component_id)

    # --- Connection operations ---

    def add_connection(self, a: str, b: str) -> bool:
        """
        Connect two components.

        Unknown endpoints are registered with type OTHER. Self-connections
        are ignored and do not recompute.

        Returns:
            True if a new connection was made.
        """
        self._guard("add_connection")
        if a == b:
            logger.debug("add_connection: rejecting self-connection on '%s'", a)
            return False
        events: list[Event] = []
        for endpoint in (a, b):
            if not self.model.graph.has_component(endpoint):
                self.model.graph.add_component(endpoint)
                events.append(("component_registered", self.model.registry.ensure(endpoint)))
        added = self.model.graph.add_connection(a, b)
        if added:
            events.append(("connection_added", ConnectionData.between(a, b)))
        self._recompute(events)
        return added

    def remove_connection(self, a: str, b: str) -> bool:
        """Break the connection between two components, if present."""
        self._guard("remove_connection")
        removed = self.model.graph.remove_connection(a, b)
        events: list[Event] = []
        if removed:
            events.append(("connection_removed", ConnectionData.between(a, b)))
        self._recompute(events)
        return removed

    def remove_all_connections(self, component_id: str) -> list[ConnectionData]:
        """Break every connection touching a component."""
        self._guard("remove_all_connections")
        removed = self.model.graph.remove_all_connections(component_id)
        self._recompute([("connection_removed", c) for c in removed])
        return removed

    # --- Switch operations ---

    def set_switch_state(self, component_id: str, closed: bool) -> bool:
        """
        Open or close a switch.

        For an id that has not been registered yet the state is kept, but
        nothing is recomputed or notified. The stored state takes effect
        when the component is registered.

        Returns:
            True if the stored state changed.
        """
        self._guard("set_switch_state")
        changed = self.model.registry.set_switch_state(component_id, closed)
        if not self.model.graph.has_component(component_id):
            logger.debug("set_switch_state: '%s' is not registered yet", component_id)
            return changed
        if changed:
            self._recompute([("switch_changed", (component_id, bool(closed)))])
        return changed

    def toggle_switch(self, component_id: str) -> Optional[bool]:
        """Flip a registered switch. Returns the new state, or None for unknown ids."""
        self._guard("toggle_switch")
        if not self.model.graph.has_component(component_id):
            logger.debug("toggle_switch: '%s' is not registered", component_id)
            return None
        closed = not self.model.registry.is_switch_closed(component_id)
        self.set_switch_state(component_id, closed)
        return closed

    def is_switch_closed(self, component_id: str) -> bool:
        return self.model.registry.is_switch_closed(component_id)

    # --- Power listeners ---

    def register_power_listener(self, component_id: str, callback: PowerListener) -> ListenerToken:
        """Install the listener for a component, replacing any previous one."""
        return self.dispatcher.register(component_id, callback)

    def unregister_power_listener(self, component_id: str) -> bool:
        return self.dispatcher.unregister(component_id)

    def get_powered(self, component_id: str) -> bool:
        """Current energized value; False for unknown ids."""
        return self.model.powered.get(component_id, False)

    @property
    def power_map(self) -> dict[ComponentId, bool]:
        """A copy of the current power map."""
        return dict(self.model.powered)

    def powered_components(self) -> list[ComponentId]:
        return [cid for cid, value in self.model.powered.items() if value]

    def find_cycles(self) -> list[Cycle]:
        """Cycles found by the most recent recompute."""
        return list(self._cycles)

    # --- Circuit operations ---

    def reset_graph(self) -> None:
        """
        Clear all components, connections and switch states.

        Listeners that were told their component was powered receive a
        final False before the delivered-value memo is cleared. Listener
        slots themselves are kept.
        """
        self._guard("reset_graph")
        self.model.clear()
        try:
            self._recompute([("graph_reset", None)])
        finally:
            self.dispatcher.reset()
        logger.info("Circuit graph reset")

    # --- Recompute pipeline ---

    def _recompute(self, events: Optional[list[Event]] = None) -> None:
        """
        Rebuild cycles and the power map, then notify listeners and observers.

        A CircuitReentryError from any callback is held until every
        observer and listener has been notified, then raised.
        """
        graph = self.model.graph
        if self.settings.check_invariants:
            graph.check_invariants()
        if self.settings.log_graph:
            logger.debug(graph.describe())

        self._cycles = find_cycles(graph)
        self.model.powered = propagate_power(graph.component_ids, self._cycles, self.model.registry)

        reentry: list[CircuitReentryError] = []
        self._notifying = True
        try:
            for event, data in events or []:
                error = self._notify(event, data)
                if error is not None:
                    reentry.append(error)
            try:
                changed = self.dispatcher.dispatch(self.model.powered)
            except CircuitReentryError as e:
                reentry.append(e)
            else:
                if changed:
                    logger.debug("Power changed for: %s", ", ".join(changed))
            error = self._notify("power_recomputed", dict(self.model.powered))
            if error is not None:
                reentry.append(error)
        finally:
            self._notifying = False
        if reentry:
            raise reentry[0]
