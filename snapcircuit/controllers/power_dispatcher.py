"""
PowerDispatcher - Delivers power-state changes to per-component listeners.

Each component id has at most one listener slot; lights and speakers are
one-to-one with a named component. After every recompute the dispatcher
compares the new power map with the last value it delivered for each id
and calls the listener only when that value changed.
"""

import logging
from typing import Callable, Optional

from snapcircuit.models.component import ComponentId

logger = logging.getLogger(__name__)

PowerListener = Callable[[bool], None]


class CircuitReentryError(Exception):
    """Raised when a callback mutates the circuit while notifications are running."""


class ListenerToken:
    """
    Handle returned by :meth:`PowerDispatcher.register`.

    Disposing the token removes exactly the registration that produced
    it. If the slot has since been taken by another listener, disposing
    an older token leaves the newer listener in place.
    """

    def __init__(self, dispatcher: "PowerDispatcher", component_id: ComponentId, listener: PowerListener):
        self._dispatcher = dispatcher
        self.component_id = component_id
        self._listener: Optional[PowerListener] = listener

    @property
    def active(self) -> bool:
        """Whether this token's listener still occupies its slot."""
        return self._listener is not None and self._dispatcher.listener_for(self.component_id) is self._listener

    def dispose(self) -> bool:
        """Remove this registration. Returns True if a listener was removed."""
        if self._listener is None:
            return False
        removed = self._dispatcher._remove_if_current(self.component_id, self._listener)
        self._listener = None
        return removed

    def __enter__(self) -> "ListenerToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class PowerDispatcher:
    """Observer table keyed by component id with a last-delivered memo."""

    def __init__(self):
        self._listeners: dict[ComponentId, PowerListener] = {}
        self._delivered: dict[ComponentId, bool] = {}

    def register(self, component_id: str, listener: PowerListener) -> ListenerToken:
        """Install ``listener`` for a component, replacing any previous one."""
        component_id = ComponentId(component_id)
        if component_id in self._listeners:
            logger.debug("Replacing power listener for '%s'", component_id)
        self._listeners[component_id] = listener
        return ListenerToken(self, component_id, listener)

    def unregister(self, component_id: str) -> bool:
        """Clear the listener slot for a component."""
        return self._listeners.pop(component_id, None) is not None

    def listener_for(self, component_id: str) -> Optional[PowerListener]:
        return self._listeners.get(component_id)

    def last_delivered(self, component_id: str) -> bool:
        return self._delivered.get(component_id, False)

    def _remove_if_current(self, component_id: ComponentId, listener: PowerListener) -> bool:
        if self._listeners.get(component_id) is listener:
            del self._listeners[component_id]
            return True
        return False

    def dispatch(self, powered: dict[ComponentId, bool]) -> list[ComponentId]:
        """
        Push changed values to their listeners.

        Ids present in the memo but missing from ``powered`` are treated
        as unpowered. The memo is updated whether or not a listener is
        installed, so a listener registered later only hears about
        changes that happen after it registered.

        Returns:
            The ids whose value changed, in power-map order.

        Raises:
            CircuitReentryError: The first one raised by a listener, after
                every other changed id has been delivered.
        """
        changed: list[ComponentId] = []
        reentry: Optional[CircuitReentryError] = None
        for component_id in list(powered) + [cid for cid in self._delivered if cid not in powered]:
            value = bool(powered.get(component_id, False))
            if self._delivered.get(component_id, False) == value:
                continue
            self._delivered[component_id] = value
            changed.append(component_id)
            listener = self._listeners.get(component_id)
            if listener is None:
                continue
            try:
                listener(value)
            except CircuitReentryError as e:
                logger.error("Power listener for '%s' mutated the circuit during dispatch", component_id)
                if reentry is None:
                    reentry = e
            except (TypeError, AttributeError, RuntimeError, ValueError) as e:
                logger.error("Error notifying power listener for '%s': %s", component_id, e)
        if reentry is not None:
            raise reentry
        return changed

    def forget(self, component_id: str) -> None:
        """Drop the listener slot and memo of an unregistered component."""
        self._listeners.pop(component_id, None)
        self._delivered.pop(component_id, None)

    def reset(self, clear_listeners: bool = False) -> None:
        """Clear the delivered-value memo, and optionally every listener slot."""
        self._delivered.clear()
        if clear_listeners:
            self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
