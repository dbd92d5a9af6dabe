import logging
from datetime import datetime
from typing import Optional

from cortex.manager.labels import (
    get_next_action_note_label,
    is_generic_next_action_note,
    normalize_next_action_note,
)
from cortex.manager.suggestions import get_fan_suggestions
from cortex.schemas.fan import FanSnapshot
from cortex.schemas.results import NextActionSummary
from cortex.utils.locale import resolve_language

log = logging.getLogger("cortex-next-action")

SUGGESTED_ACTION_KEYS = frozenset({
    "BREAK_ICE",
    "BUILD_RAPPORT",
    "OFFER_EXTRA",
    "PUSH_MONTHLY",
    "SEND_PAYMENT_LINK",
    "SUPPORT",
    "SAFETY",
})

REPLY_COPY = {
    "es": ("Responder", "¡Gracias por escribirme! ¿Qué te apetece hoy?"),
    "en": ("Reply", "Thanks for your message! What are you in the mood for today?"),
}
NO_ACTION_LABEL = "—"


def is_suggested_action_key(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    return value.strip().upper() in SUGGESTED_ACTION_KEYS


def get_manual_next_action_label(fan: FanSnapshot, language: str = "es") -> str:
    """
    Operator-authored note, verbatim once the legacy schedule suffix is gone.
    Generic placeholders only count when a due date gives them meaning.
    """
    raw = fan.next_action_note or ""
    if not normalize_next_action_note(raw) and fan.next_action and not is_suggested_action_key(fan.next_action):
        raw = fan.next_action

    normalized = normalize_next_action_note(raw)
    if not normalized:
        return ""
    if not is_generic_next_action_note(normalized):
        return normalized
    if fan.next_action_at is not None:
        return get_next_action_note_label(normalized, has_date=True, lang=language)
    return ""


def summarize_next_action(
    fan: FanSnapshot,
    lang: Optional[str] = None,
    has_unread_inbound: bool = False,
    now: Optional[datetime] = None,
) -> NextActionSummary:
    """Unread inbound beats a manual note, which beats the suggested action."""
    language = resolve_language(
        [lang, fan.language, fan.preferred_language, fan.locale],
        fallback_text=fan.last_inbound_text,
    )

    if has_unread_inbound:
        label, text = REPLY_COPY[language]
        return NextActionSummary(
            needs_action=True,
            action_key="REPLY",
            action_label=label,
            action_text=text,
            source="reply",
            language=language,
        )

    manual_label = get_manual_next_action_label(fan, language)
    if manual_label:
        return NextActionSummary(
            needs_action=True,
            action_key=None,
            action_label=manual_label,
            action_text=None,
            source="manual",
            language=language,
        )

    score = fan.temperature_score if fan.temperature_score is not None else fan.heat_score
    suggestion = get_fan_suggestions(
        language=language,
        temperature_bucket=fan.temperature_bucket,
        temperature_score=score,
        last_intent_key=fan.last_intent_key,
        next_action=fan.next_action,
        membership_status=fan.membership_status,
        days_left=fan.days_left,
        last_purchase_at=fan.last_purchase_at,
        last_inbound_at=fan.last_inbound_at,
        now=now,
    )
    has_suggestion = bool(suggestion.next_action_key)
    log.debug("Suggested next action=%s", suggestion.next_action_key)

    return NextActionSummary(
        needs_action=has_suggestion,
        action_key=suggestion.next_action_key,
        action_label=suggestion.next_action_label or NO_ACTION_LABEL,
        action_text=suggestion.next_action_text,
        source="suggested" if has_suggestion else "none",
        language=language,
    )
