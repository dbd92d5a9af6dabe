"""
Fan-engagement decision engine.

Classifies a fan's intent, scores engagement heat, derives the fan state and
recommends the next action for the creator (or the operator assisting them).

Main entry points:
- `classify_intent` in cortex.intent
- `compute_heat` in cortex.heat
- `derive_fan_state`, `get_fan_suggestions`, `summarize_next_action` in cortex.manager
"""

from .intent import classify_intent, detect_intent_rules
from .heat import compute_heat, compute_temperature_from_message
from .manager import derive_fan_state, get_fan_suggestions, summarize_next_action

__all__ = [
    "classify_intent",
    "detect_intent_rules",
    "compute_heat",
    "compute_temperature_from_message",
    "derive_fan_state",
    "get_fan_suggestions",
    "summarize_next_action",
]
