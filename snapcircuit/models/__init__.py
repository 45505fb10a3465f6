"""
Pure Python data models for snapcircuit.

This package contains the graph store and component registry. All
models use only Python standard library types.
"""

from .circuit import CircuitModel
from .component import COMPONENT_TYPES, ComponentData, ComponentId, ComponentType
from .connection import ConnectionData
from .graph import CircuitGraph, GraphInvariantError
from .registry import ComponentRegistry

__all__ = [
    "CircuitModel",
    "CircuitGraph",
    "ComponentRegistry",
    "ComponentData",
    "ComponentId",
    "ComponentType",
    "COMPONENT_TYPES",
    "ConnectionData",
    "GraphInvariantError",
]
