"""
ComponentRegistry - Functional type and switch state per component.

Lookups for unknown ids return the defaults (OTHER, open) rather than
raising, because switch and connection events can arrive before the
component that owns them has been registered.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .component import ComponentData, ComponentId, ComponentType

logger = logging.getLogger(__name__)


@dataclass
class ComponentRegistry:
    """Typed lookups for the power propagation rule."""

    entries: dict[ComponentId, ComponentData] = field(default_factory=dict)

    def register(
        self,
        component_id: str,
        component_type: ComponentType = ComponentType.OTHER,
        label: Optional[str] = None,
    ) -> ComponentData:
        """
        Create or update the entry for a component.

        A stored switch state survives re-registration so that a switch
        toggled before it was typed keeps its position.
        """
        component_id = ComponentId(component_id)
        entry = self.entries.get(component_id)
        if entry is None:
            entry = ComponentData(component_id=component_id, component_type=component_type, label=label)
            self.entries[component_id] = entry
        else:
            entry.component_type = component_type
            if label:
                entry.label = label
        return entry

    def ensure(self, component_id: str) -> ComponentData:
        """Return the entry for a component, creating an OTHER entry if missing."""
        entry = self.entries.get(component_id)
        if entry is None:
            entry = self.register(component_id)
        return entry

    def get(self, component_id: str) -> Optional[ComponentData]:
        return self.entries.get(component_id)

    def remove(self, component_id: str) -> Optional[ComponentData]:
        return self.entries.pop(component_id, None)

    def set_type(self, component_id: str, component_type: ComponentType) -> None:
        self.ensure(component_id).component_type = component_type

    def get_type(self, component_id: str) -> ComponentType:
        entry = self.entries.get(component_id)
        return entry.component_type if entry else ComponentType.OTHER

    def set_switch_state(self, component_id: str, closed: bool) -> bool:
        """
        Store the switch state for a component.

        Returns:
            True if the stored value changed.
        """
        entry = self.ensure(component_id)
        if entry.component_type not in (ComponentType.SWITCH, ComponentType.OTHER):
            logger.warning("Setting switch state on '%s' which is a %s", component_id, entry.component_type.value)
        closed = bool(closed)
        if entry.closed == closed:
            return False
        entry.closed = closed
        return True

    def is_switch_closed(self, component_id: str) -> bool:
        entry = self.entries.get(component_id)
        return entry.closed if entry else False

    def ids_of_type(self, component_type: ComponentType) -> list[ComponentId]:
        return [cid for cid, entry in self.entries.items() if entry.component_type is component_type]

    def clear(self) -> None:
        self.entries.clear()

    def to_dict(self) -> list[dict]:
        return [entry.to_dict() for entry in self.entries.values()]
