"""
snapcircuit - power-state core for snap-together circuit scenes.

Models a circuit as a graph of named components, finds the closed loops
that carry power, and notifies listeners when a component's power state
changes.
"""

from .controllers import CircuitController, CircuitReentryError, ListenerToken
from .models import CircuitModel, ComponentType
from .settings import CircuitSettings

__version__ = "1.0.0"

__all__ = [
    "CircuitController",
    "CircuitReentryError",
    "ListenerToken",
    "CircuitModel",
    "ComponentType",
    "CircuitSettings",
    "__version__",
]
