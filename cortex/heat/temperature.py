from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from cortex.schemas.labels import heat_label_for
from cortex.schemas.results import TemperatureResult
from cortex.utils.timestamps import ensure_utc, finite_or_zero, parse_date, round_half_up

DECAY_PER_DAY = 5
INBOUND_POINTS = 8
INTENT_POINTS = {"BUY_NOW": 35, "PRICE_ASK": 20}
RECENT_PURCHASE_POINTS = 50
RECENT_PURCHASE_WINDOW = timedelta(days=7)


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def compute_temperature_from_message(
    previous_score: Optional[float] = None,
    last_inbound_at: Any = None,
    intent_key: Optional[str] = None,
    last_purchase_at: Any = None,
    now: Optional[datetime] = None,
) -> TemperatureResult:
    """
    Incremental temperature update applied when a new fan message arrives:
    decay since the previous inbound, then inbound/intent/purchase boosts.
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    previous = finite_or_zero(previous_score)
    last_inbound = parse_date(last_inbound_at)
    last_purchase = parse_date(last_purchase_at)
    intent = (intent_key or "").strip().upper()

    reasons = []
    days_since = max(0, (now - last_inbound).days) if last_inbound else 0
    score = _clamp(previous - days_since * DECAY_PER_DAY)
    if days_since > 0:
        reasons.append(f"Decaimiento -{days_since * DECAY_PER_DAY}")

    if intent == "UNSAFE_MINOR":
        return TemperatureResult(score=0, bucket="COLD", reasons=["Unsafe intent"])

    score += INBOUND_POINTS
    reasons.append(f"Inbound +{INBOUND_POINTS}")

    if intent in INTENT_POINTS:
        score += INTENT_POINTS[intent]
        reasons.append(f"Intent {intent} +{INTENT_POINTS[intent]}")

    if last_purchase and now - last_purchase <= RECENT_PURCHASE_WINDOW:
        score += RECENT_PURCHASE_POINTS
        reasons.append(f"Compra reciente +{RECENT_PURCHASE_POINTS}")

    clamped = round_half_up(_clamp(score))
    return TemperatureResult(score=clamped, bucket=heat_label_for(clamped), reasons=reasons[:3])


def resolve_next_action(intent_key: Optional[str] = None, temperature_bucket: Optional[str] = None) -> str:
    intent = (intent_key or "").strip().upper()
    bucket = (temperature_bucket or "").strip().upper()
    if intent == "UNSAFE_MINOR":
        return "SAFETY"
    if intent == "SUPPORT":
        return "SUPPORT"
    if intent == "BUY_NOW":
        return "SEND_PAYMENT_LINK"
    if intent == "PRICE_ASK":
        return "OFFER_EXTRA"

    if bucket == "HOT":
        return "PUSH_MONTHLY"
    if bucket == "WARM":
        return "BUILD_RAPPORT"
    if bucket == "COLD":
        return "BREAK_ICE"
    return "BUILD_RAPPORT"
