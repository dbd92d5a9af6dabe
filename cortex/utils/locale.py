import re
from typing import Iterable, Literal, Optional

Language = Literal["es", "en"]

DEFAULT_LANGUAGE: Language = "es"

# (pattern, language, weight)
_LANGUAGE_HINTS = [
    (re.compile(r"\b(hola|gracias|buenas|por favor|quiero|cuando|donde|porque|pero|vale)\b"), "es", 2),
    (re.compile(r"\b(the|and|you|thanks|hello|hi|please|want|when|where|because|but|ok|okay)\b"), "en", 2),
    (re.compile(r"\b(que|para|como|esta|estoy|tengo|puedo)\b"), "es", 1),
    (re.compile(r"\b(what|how|i am|im|are you|do you|can you|i have)\b"), "en", 1),
]


def normalize_locale_base(value: Optional[str]) -> str:
    """'en-US' / 'en_GB' / ' ES ' -> 'en' / 'en' / 'es'."""
    if not isinstance(value, str):
        return ""
    trimmed = value.strip().lower()
    if not trimmed:
        return ""
    return trimmed.replace("_", "-").split("-")[0]


def infer_language_from_text(text: Optional[str]) -> Optional[Language]:
    if not text or not text.strip():
        return None
    lowered = text.lower()

    scores = {"es": 0, "en": 0}
    for pattern, lang, weight in _LANGUAGE_HINTS:
        if pattern.search(lowered):
            scores[lang] += weight

    if scores["es"] == scores["en"]:
        return None
    return "es" if scores["es"] > scores["en"] else "en"


def resolve_language(
    candidates: Iterable[Optional[str]],
    fallback_text: Optional[str] = None,
) -> Language:
    """First supported locale among candidates, then inference from text, then Spanish."""
    for candidate in candidates:
        base = normalize_locale_base(candidate)
        if base in ("es", "en"):
            return base
    inferred = infer_language_from_text(fallback_text)
    if inferred:
        return inferred
    return DEFAULT_LANGUAGE
