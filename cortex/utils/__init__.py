"""
Utility helpers shared by the engine modules.

- timestamps: date parsing, id-embedded timestamps, half-up rounding
- locale: locale base subtags and es/en inference
- prompt_logging: redacted prompt logging
"""

from .timestamps import (
    ensure_utc,
    parse_date,
    timestamp_from_id,
    round_half_up,
    finite_or_zero,
)
from .locale import normalize_locale_base, resolve_language, infer_language_from_text
from .prompt_logging import log_prompt

__all__ = [
    # Timestamps
    "ensure_utc",
    "parse_date",
    "timestamp_from_id",
    "round_half_up",
    "finite_or_zero",
    # Locale
    "normalize_locale_base",
    "resolve_language",
    "infer_language_from_text",
    # Logging
    "log_prompt",
]
