"""
Controllers for snapcircuit.

This package contains the circuit-state context that collaborators call
into, the per-component power listener table, and circuit file loading.
"""

from .circuit_controller import CircuitController, CircuitReentryError
from .file_controller import FileController, apply_event, read_circuit_file, validate_circuit_data
from .power_dispatcher import ListenerToken, PowerDispatcher

__all__ = [
    "CircuitController",
    "CircuitReentryError",
    "PowerDispatcher",
    "ListenerToken",
    "FileController",
    "apply_event",
    "read_circuit_file",
    "validate_circuit_data",
]
