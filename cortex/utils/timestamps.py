import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# ids look like "<fanId>-<epoch millis>"
MIN_EPOCH_MS_DIGITS = 10


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Lenient datetime parsing for values coming from the caller.
    Accepts datetimes, dates, ISO strings (date-only strings become midnight UTC)
    and epoch milliseconds. Anything unparseable returns None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    if not trimmed:
        return None
    if DATE_ONLY_RE.match(trimmed):
        trimmed = f"{trimmed}T00:00:00"
    if trimmed.endswith("Z"):
        trimmed = trimmed[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(trimmed))
    except ValueError:
        return None


def timestamp_from_id(message_id: Optional[str]) -> Optional[datetime]:
    """Recovers the epoch-millis suffix after the last '-' of a message id."""
    if not message_id:
        return None
    head, sep, tail = message_id.rpartition("-")
    if not sep or not tail.isascii() or not tail.isdecimal():
        return None
    millis = int(tail)
    if len(str(millis)) < MIN_EPOCH_MS_DIGITS:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores round .5 up
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def finite_or_zero(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0
