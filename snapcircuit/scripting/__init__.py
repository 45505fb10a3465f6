"""
snapcircuit Scripting API - programmatic circuit creation and inspection.

Usage::

    from snapcircuit.scripting import Circuit

    circuit = Circuit()
    circuit.add("B1", "Battery").add("L1", "LED").add("S1", "Switch")
    circuit.loop("B1", "L1", "S1")
    circuit.is_powered("L1")    # False, S1 is open
    circuit.close("S1")
    circuit.is_powered("L1")    # True
"""

from snapcircuit.scripting.circuit import Circuit

__all__ = ["Circuit"]
