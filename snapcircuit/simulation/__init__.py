from .cycle_detector import cycle_key, find_cycles
from .power_propagator import cycle_qualifies, propagate_power, qualifying_cycles

__all__ = ['find_cycles', 'cycle_key', 'cycle_qualifies', 'propagate_power', 'qualifying_cycles']
