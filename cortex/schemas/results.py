import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class IntentResult:
    intent: str
    confidence: float
    signals: Dict[str, Any] = field(default_factory=dict)
    # set when the remote classifier reported rate limiting / auth problems
    error_code: Optional[str] = None

    def __post_init__(self):
        try:
            value = float(self.confidence)
        except (TypeError, ValueError):
            value = 0.0
        if not math.isfinite(value):
            value = 0.0
        self.confidence = max(0.0, min(1.0, value))


@dataclass
class HeatResult:
    score: int
    label: str
    reasons: List[str] = field(default_factory=list)


@dataclass
class TemperatureResult:
    score: int
    bucket: str
    reasons: List[str] = field(default_factory=list)


@dataclass
class StateChip:
    label: str
    tone: str


@dataclass
class FanStateContext:
    days_left: Optional[int]
    inactivity_days: Optional[int]
    extras_count: int
    extras_spent_total: float
    lifetime_spend: float
    has_active_monthly: bool
    has_active_special: bool
    has_active_trial: bool
    expiry_tag_soon: bool
    follow_up_tag: Optional[str]
    fan_messages_count: int
    creator_messages_count: int
    is_new: bool
    is_vip: bool
    is_cold: bool
    is_near_expiry: bool


@dataclass
class FanStateAnalysis:
    state: str
    objective: str
    headline: str
    chips: List[StateChip]
    context: FanStateContext


@dataclass
class SuggestionChip:
    key: str
    label: str
    insert_text: str


@dataclass
class Suggestion:
    language: str
    intent_label: Optional[str]
    next_action_key: Optional[str]
    next_action_label: Optional[str]
    next_action_text: Optional[str]
    chips: List[SuggestionChip] = field(default_factory=list)


@dataclass
class NextActionSummary:
    needs_action: bool
    action_key: Optional[str]
    action_label: str
    action_text: Optional[str]
    source: str
    language: str
