import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from cortex.utils.timestamps import DATE_ONLY_RE, ensure_utc, parse_date

LEGACY_SCHEDULE_RE = re.compile(r"\s*\(para\s+\d{4}-\d{2}-\d{2}(?:\s+\d{2}:\d{2})?\)\s*$", re.IGNORECASE)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

GENERIC_FOLLOW_UPS = {"seguimiento", "follow up", "followup"}

COPY = {
    "es": {
        "follow_up": "Seguimiento",
        "follow_up_no_note": "Seguimiento (sin nota)",
        "today": "Hoy",
        "tomorrow": "Mañana",
        "in_days": "En {days}d",
    },
    "en": {
        "follow_up": "Follow-up",
        "follow_up_no_note": "Follow-up (no note)",
        "today": "Today",
        "tomorrow": "Tomorrow",
        "in_days": "In {days}d",
    },
}


def _copy(lang: Optional[str]) -> dict:
    return COPY["en"] if lang == "en" else COPY["es"]


def normalize_next_action_note(note: Optional[str]) -> str:
    """Strips the legacy '(para YYYY-MM-DD HH:MM)' suffix older notes carry."""
    if not isinstance(note, str):
        return ""
    trimmed = note.strip()
    if not trimmed:
        return ""
    return LEGACY_SCHEDULE_RE.sub("", trimmed).strip()


def is_generic_next_action_note(note: Optional[str]) -> bool:
    normalized = _NON_ALNUM_RE.sub(" ", normalize_next_action_note(note).lower()).strip()
    return not normalized or normalized in GENERIC_FOLLOW_UPS


def get_next_action_note_label(note: Optional[str], has_date: bool = False, lang: Optional[str] = "es") -> str:
    copy = _copy(lang)
    normalized = normalize_next_action_note(note)
    if not normalized or is_generic_next_action_note(normalized):
        return copy["follow_up_no_note"] if has_date else copy["follow_up"]
    return normalized


def format_when(value: Any, now: Optional[datetime] = None, lang: Optional[str] = "es") -> str:
    target = parse_date(value)
    if not target:
        return ""
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    copy = _copy(lang)

    diff_days = (target.date() - now.date()).days
    if diff_days == 0:
        return copy["today"]
    if diff_days == 1:
        return copy["tomorrow"]
    if 2 <= diff_days <= 7:
        return copy["in_days"].format(days=diff_days)
    if lang == "en":
        return target.strftime("%m/%d")
    return target.strftime("%d/%m")


def format_iso_date(value: Any) -> str:
    if isinstance(value, str) and DATE_ONLY_RE.match(value.strip()):
        return value.strip()
    target = parse_date(value)
    if not target:
        return ""
    return target.date().isoformat()


def format_next_action_tooltip(value: Any = None, note: Optional[str] = None, lang: Optional[str] = "es") -> str:
    date_label = format_iso_date(value)
    note_label = get_next_action_note_label(note, bool(date_label), lang)
    if not date_label:
        return note_label
    return f"{note_label} · {date_label}"


def format_next_action_label(
    value: Any = None,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
    lang: Optional[str] = "es",
) -> str:
    when = format_when(value, now, lang)
    if not when and not normalize_next_action_note(note):
        return ""
    note_label = get_next_action_note_label(note, bool(when), lang)
    if not when:
        return f"⏰ {note_label}"
    return f"⏰ {when} · {note_label}"


def is_same_day(a: Any, b: Any) -> bool:
    left = parse_date(a)
    right = parse_date(b)
    if not left or not right:
        return False
    return left.date() == right.date()


def is_today(value: Any, now: Optional[datetime] = None) -> bool:
    return is_same_day(value, now or datetime.now(timezone.utc))


def is_tomorrow(value: Any, now: Optional[datetime] = None) -> bool:
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    return is_same_day(value, now + timedelta(days=1))
