from cortex.heat.scoring import INTENT_BOOSTS, compute_heat
from cortex.heat.temperature import compute_temperature_from_message, resolve_next_action

__all__ = [
    "INTENT_BOOSTS",
    "compute_heat",
    "compute_temperature_from_message",
    "resolve_next_action",
]
