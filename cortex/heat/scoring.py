import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from cortex.schemas.fan import Message, Purchase
from cortex.schemas.labels import heat_label_for
from cortex.schemas.results import HeatResult
from cortex.utils.timestamps import ensure_utc, finite_or_zero, round_half_up

log = logging.getLogger("cortex-heat")

BASELINE_SCORE = 10
MAX_REASONS = 3

FREQUENCY_POINTS_PER_MSG = 3
FREQUENCY_CAP = 18
SPEND_UNITS_PER_POINT = 5
SPEND_CAP = 15
SUBSCRIPTION_POINTS = 8
SUBSCRIPTION_MARKERS = ("active", "monthly", "mensual", "sub")

INTENT_BOOSTS: Dict[str, int] = {
    "GREETING": 2,
    "FLIRT": 6,
    "CONTENT_REQUEST": 10,
    "CUSTOM_REQUEST": 12,
    "PRICE_ASK": 14,
    "BUY_NOW": 20,
    "SUBSCRIBE": 12,
    "CANCEL": -12,
    "OFF_PLATFORM": -10,
    "SUPPORT": -8,
    "OBJECTION": -8,
    "RUDE_OR_HARASS": -30,
    "UNSAFE_MINOR": -50,
    "OTHER": 0,
}

# (max age, points, reason), first bucket that fits wins
MESSAGE_RECENCY = [
    (timedelta(hours=24), 18, "Msg <24h +18"),
    (timedelta(hours=72), 10, "Msg <72h +10"),
    (timedelta(days=7), 4, "Msg <7d +4"),
]
INACTIVE_PENALTY = (-8, "Inactivo >7d -8")

PURCHASE_RECENCY = [
    (timedelta(hours=24), 20, "Compra <24h +20"),
    (timedelta(days=7), 12, "Compra <7d +12"),
    (timedelta(days=30), 6, "Compra <30d +6"),
]


def compute_heat(
    recent_messages: Optional[Iterable[Message]],
    recent_purchases: Optional[Iterable[Purchase]] = None,
    subscription_status: Optional[str] = None,
    last_seen_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> HeatResult:
    """
    Engagement heat for one fan from recent history.

    Starts at 10 and applies each rule independently: fan message recency,
    7-day frequency, purchase recency, 30-day spend, active subscription and
    the intent of the latest fan message. Reasons keep rule order, not magnitude.
    `last_seen_at` is accepted for callers that pass it but does not score.
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    score: float = BASELINE_SCORE
    reasons: List[str] = []

    fan_messages = [m for m in (recent_messages or []) if m.is_fan]
    stamped = [(m, m.timestamp()) for m in fan_messages]

    fan_timestamps = [ts for _, ts in stamped if ts is not None]
    if fan_timestamps:
        age = now - max(fan_timestamps)
        for max_age, points, reason in MESSAGE_RECENCY:
            if age <= max_age:
                score += points
                reasons.append(reason)
                break
        else:
            points, reason = INACTIVE_PENALTY
            score += points
            reasons.append(reason)

    recent_count = sum(1 for ts in fan_timestamps if now - ts <= timedelta(days=7))
    if recent_count > 0:
        freq_points = min(recent_count * FREQUENCY_POINTS_PER_MSG, FREQUENCY_CAP)
        score += freq_points
        reasons.append(f"Frecuencia 7d +{freq_points}")

    purchases = list(recent_purchases or [])
    if purchases:
        age = now - max(p.created_at for p in purchases)
        for max_age, points, reason in PURCHASE_RECENCY:
            if age <= max_age:
                score += points
                reasons.append(reason)
                break

    purchases_30d = [p for p in purchases if now - p.created_at <= timedelta(days=30)]
    if purchases_30d:
        total_30d = finite_or_zero(sum(p.amount for p in purchases_30d))
        value_points = min(round_half_up(total_30d / SPEND_UNITS_PER_POINT), SPEND_CAP)
        if value_points > 0:
            score += value_points
            reasons.append(f"Gasto 30d +{value_points}")

    subscription = (subscription_status or "").lower()
    if any(marker in subscription for marker in SUBSCRIPTION_MARKERS):
        score += SUBSCRIPTION_POINTS
        reasons.append(f"Sub activa +{SUBSCRIPTION_POINTS}")

    if stamped:
        # stable sort: messages without a timestamp count as oldest
        latest, _ = sorted(
            stamped,
            key=lambda pair: pair[1].timestamp() if pair[1] else 0.0,
            reverse=True,
        )[0]
        last_intent = (latest.intent_key or "").strip().upper()
        delta = INTENT_BOOSTS.get(last_intent, 0)
        if last_intent and delta != 0:
            score += delta
            reasons.append(f"Intent {last_intent} {'+' if delta > 0 else ''}{delta}")

    if not math.isfinite(score):
        log.warning("Non-finite heat score, resetting to 0")
        score = 0
    clamped = round_half_up(max(0.0, min(100.0, score)))

    return HeatResult(score=clamped, label=heat_label_for(clamped), reasons=reasons[:MAX_REASONS])
