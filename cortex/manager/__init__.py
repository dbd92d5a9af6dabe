"""
Creator-side manager logic: fan state, suggested replies and the single
next action shown to the operator.

Main entry point is `summarize_next_action` in next_action.py.
"""

from .state import derive_fan_state, get_default_fan_tone
from .suggestions import get_fan_suggestions
from .next_action import summarize_next_action
from .labels import (
    normalize_next_action_note,
    is_generic_next_action_note,
    get_next_action_note_label,
    format_next_action_label,
    format_next_action_tooltip,
)

__all__ = [
    # Fan state
    "derive_fan_state",
    "get_default_fan_tone",
    # Suggestions
    "get_fan_suggestions",
    "summarize_next_action",
    # Labels
    "normalize_next_action_note",
    "is_generic_next_action_note",
    "get_next_action_note_label",
    "format_next_action_label",
    "format_next_action_tooltip",
]
