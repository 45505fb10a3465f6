"""
ComponentData - Pure Python data model for circuit components.

Components are keyed by a ComponentId, the stable scene name of the
object the component belongs to. The functional type is a closed
enumeration so a typo in a circuit file fails loudly instead of
introducing a new kind of component.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Optional

ComponentId = NewType("ComponentId", str)


class ComponentType(Enum):
    """Functional classification of a circuit component."""

    BATTERY = "Battery"
    LED = "LED"
    MOTOR = "Motor"
    WIRE = "Wire"
    SWITCH = "Switch"
    OTHER = "Other"

    @classmethod
    def from_name(cls, name: str) -> "ComponentType":
        """
        Parse a type name case-insensitively.

        Accepts both the display value ("Battery") and the member name
        ("BATTERY").

        Raises:
            ValueError: If the name does not match any component type.
        """
        if isinstance(name, cls):
            return name
        cleaned = str(name).strip().lower()
        for member in cls:
            if cleaned in (member.value.lower(), member.name.lower()):
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown component type '{name}'. Valid types: {valid}")


COMPONENT_TYPES = [t.value for t in ComponentType]


@dataclass
class ComponentData:
    """
    A registered circuit component.

    ``closed`` only matters for switches but is kept for every type so
    switch events that arrive before the component is typed are not lost.
    """

    component_id: ComponentId
    component_type: ComponentType = ComponentType.OTHER
    closed: bool = False
    label: Optional[str] = None

    def __post_init__(self):
        if not self.label:
            self.label = str(self.component_id)

    @property
    def is_switch(self) -> bool:
        return self.component_type is ComponentType.SWITCH

    @property
    def is_battery(self) -> bool:
        return self.component_type is ComponentType.BATTERY

    def to_dict(self) -> dict:
        """Serialize to the circuit file component format."""
        data = {
            "id": str(self.component_id),
            "type": self.component_type.value,
        }
        if self.is_switch or self.closed:
            data["closed"] = self.closed
        if self.label != str(self.component_id):
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ComponentData":
        """Deserialize from the circuit file component format."""
        return cls(
            component_id=ComponentId(data["id"]),
            component_type=ComponentType.from_name(data.get("type", "Other")),
            closed=bool(data.get("closed", False)),
            label=data.get("label"),
        )

    def __repr__(self) -> str:
        state = ""
        if self.is_switch:
            state = " closed" if self.closed else " open"
        return f"ComponentData({self.component_id}: {self.component_type.value}{state})"
