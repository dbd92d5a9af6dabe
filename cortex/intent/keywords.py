import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from cortex.schemas.results import IntentResult

log = logging.getLogger("cortex-intent-rules")


@dataclass(frozen=True)
class IntentRule:
    intent: str
    keywords: Tuple[str, ...]
    confidence: float


KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "GREETING": ("hola", "hey", "hi", "hello", "salut", "buenas", "holi"),
    "FLIRT": ("guap", "sexy", "linda", "handsome", "pretty", "te deseo", "hot", "atractiv"),
    "CONTENT_REQUEST": (
        "quiero ver",
        "enséñame",
        "send pic",
        "send photo",
        "send video",
        "foto",
        "video",
        "poze",
        "poza",
        "vedea",
    ),
    "CUSTOM_REQUEST": ("custom", "personaliz", "a medida", "hazme", "quiero uno especial", "pedido especial"),
    "PRICE_ASK": ("precio", "cuánto", "cuesta", "how much", "price", "cat costa", "cât costă", "pret"),
    "BUY_NOW": ("lo quiero", "ok", "vale", "send link", "i’ll buy", "ill buy", "take it", "vreau", "buy now"),
    "SUBSCRIBE": ("suscribir", "subscribe", "suscripción", "abonament", "abonar"),
    "CANCEL": ("cancel", "cancelar", "unsubscribe", "desuscribir", "renovar no", "anular"),
    "OFF_PLATFORM": ("telegram", "whatsapp", "insta", "instagram", "snap", "snapchat", "discord"),
    "SUPPORT": ("no puedo pagar", "error", "doesn't work", "doesnt work", "nu merge", "payment failed", "falló", "falla"),
    "OBJECTION": ("caro", "expensive", "later", "más tarde", "no sé", "nose", "maybe", "not sure", "dubiu"),
    "RUDE_OR_HARASS": ("idiot", "estupido", "imbecil", "perra", "puta", "bitch", "cállate", "retard", "asshole"),
}

# Order matters: first matching rule wins, there is no scoring across rules.
RULES: List[IntentRule] = [
    IntentRule("PRICE_ASK", KEYWORDS["PRICE_ASK"], 0.85),
    IntentRule("BUY_NOW", KEYWORDS["BUY_NOW"], 0.8),
    IntentRule("OFF_PLATFORM", KEYWORDS["OFF_PLATFORM"], 0.85),
    IntentRule("SUBSCRIBE", KEYWORDS["SUBSCRIBE"], 0.8),
    IntentRule("CANCEL", KEYWORDS["CANCEL"], 0.8),
    IntentRule("SUPPORT", KEYWORDS["SUPPORT"], 0.82),
    IntentRule("OBJECTION", KEYWORDS["OBJECTION"], 0.78),
    IntentRule("CONTENT_REQUEST", KEYWORDS["CONTENT_REQUEST"], 0.8),
    IntentRule("CUSTOM_REQUEST", KEYWORDS["CUSTOM_REQUEST"], 0.8),
    IntentRule("GREETING", KEYWORDS["GREETING"], 0.75),
    IntentRule("FLIRT", KEYWORDS["FLIRT"], 0.76),
    IntentRule("RUDE_OR_HARASS", KEYWORDS["RUDE_OR_HARASS"], 0.9),
]

AGE_RE = re.compile(r"\b(?:tengo\s+)?(1[0-7]|[0-9]{1,2})\s?(?:años|an|ani|yo|y\.o\.|years|yrs)?\b")
ADULT_AGE = 18
UNSAFE_MINOR_CONFIDENCE = 0.95

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_intent_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def detect_minor_age(text: str) -> Optional[str]:
    """Returns the first age-like expression when it states an age under 18."""
    match = AGE_RE.search(text)
    if match and int(match.group(1)) < ADULT_AGE:
        return match.group(0)
    return None


def detect_intent_rules(raw_text: Optional[str], lang: Optional[str] = None) -> Optional[IntentResult]:
    text = normalize_intent_text(raw_text)
    if not text:
        return None

    age_match = detect_minor_age(text)
    if age_match:
        log.info("Age expression matched: %r", age_match)
        return IntentResult(
            intent="UNSAFE_MINOR",
            confidence=UNSAFE_MINOR_CONFIDENCE,
            signals={"matched_keywords": [age_match], "lang": lang},
        )

    for rule in RULES:
        match = next((kw for kw in rule.keywords if kw in text), None)
        if match:
            log.debug("Rule match: intent=%s keyword=%r", rule.intent, match)
            return IntentResult(
                intent=rule.intent,
                confidence=rule.confidence,
                signals={"matched_keywords": [match], "lang": lang},
            )

    return None
