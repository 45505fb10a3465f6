"""
simulation/power_propagator.py

Energized classification of components from the cycle list.

A cycle qualifies when it contains at least one battery and every
switch on it is closed. A component is energized when it sits on at
least one qualifying cycle. There are no voltages or currents here:
the result is one boolean per component.
"""

import logging
from typing import Iterable

from snapcircuit.models.component import ComponentId, ComponentType
from snapcircuit.models.registry import ComponentRegistry

logger = logging.getLogger(__name__)


def cycle_qualifies(cycle: Iterable[str], registry: ComponentRegistry) -> bool:
    """
    Check whether a cycle can carry power.

    Args:
        cycle: Component ids on the cycle.
        registry: Source of component types and switch states.

    Returns:
        True if the cycle holds a battery and no open switch.
    """
    has_battery = False
    for component_id in cycle:
        component_type = registry.get_type(component_id)
        if component_type is ComponentType.SWITCH and not registry.is_switch_closed(component_id):
            return False
        if component_type is ComponentType.BATTERY:
            has_battery = True
    return has_battery


def qualifying_cycles(cycles, registry: ComponentRegistry) -> list[tuple]:
    """Return the cycles that satisfy :func:`cycle_qualifies`."""
    return [cycle for cycle in cycles if cycle_qualifies(cycle, registry)]


def propagate_power(component_ids: Iterable[str], cycles,
                    registry: ComponentRegistry) -> dict[ComponentId, bool]:
    """
    Build a complete power map.

    Every id in ``component_ids`` gets an entry. The map is built from
    scratch, so a component that lost its last qualifying cycle comes
    back as False rather than keeping a stale True.
    """
    energized: set[str] = set()
    for cycle in qualifying_cycles(cycles, registry):
        energized.update(cycle)

    powered = {ComponentId(cid): cid in energized for cid in component_ids}
    logger.debug("Energized %d of %d component(s)", sum(powered.values()), len(powered))
    return powered
