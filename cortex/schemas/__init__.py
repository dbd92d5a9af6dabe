from .fan import Message, Purchase, FanSnapshot
from .labels import INTENT_VALUES, FAN_STATES, HEAT_LABELS, heat_label_for
from .results import (
    IntentResult,
    HeatResult,
    TemperatureResult,
    StateChip,
    FanStateContext,
    FanStateAnalysis,
    SuggestionChip,
    Suggestion,
    NextActionSummary,
)

__all__ = [
    # Consumed
    "Message",
    "Purchase",
    "FanSnapshot",
    # Labels
    "INTENT_VALUES",
    "FAN_STATES",
    "HEAT_LABELS",
    "heat_label_for",
    # Produced
    "IntentResult",
    "HeatResult",
    "TemperatureResult",
    "StateChip",
    "FanStateContext",
    "FanStateAnalysis",
    "SuggestionChip",
    "Suggestion",
    "NextActionSummary",
]
