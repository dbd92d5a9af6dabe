import logging
from typing import Any, Optional, Sequence

from cortex.core.config import settings
from cortex.intent.keywords import detect_intent_rules, normalize_intent_text
from cortex.intent.remote import LLM_FAILED_CONFIDENCE, classify_intent_llm
from cortex.schemas.results import IntentResult

log = logging.getLogger("cortex-intent")

EMPTY_CONFIDENCE = 0.3
_DEGRADED_REASONS = ("llm_failed", "parse_failed")


async def classify_intent(
    text: Optional[str],
    lang: Optional[str] = None,
    context: Optional[Sequence[str]] = None,
    creator_id: Optional[str] = None,
    fan_id: Optional[str] = None,
    min_rule_confidence: Optional[float] = None,
    llm: Any = None,
) -> IntentResult:
    """
    Rule cascade first, remote classifier second.

    Returns a rule match directly when it reaches `min_rule_confidence`
    (UNSAFE_MINOR age matches always do). Otherwise asks the remote
    classifier; if that is unreachable or answers garbage, the rule match
    below threshold is returned, else OTHER at low confidence. Never raises.
    """
    normalized = normalize_intent_text(text)
    if not normalized:
        return IntentResult(intent="OTHER", confidence=EMPTY_CONFIDENCE, signals={"reason": "empty"})

    threshold = (
        min_rule_confidence
        if isinstance(min_rule_confidence, (int, float))
        else settings.INTENT_MIN_RULE_CONFIDENCE
    )

    rule_result = detect_intent_rules(normalized, lang)
    if rule_result and (rule_result.intent == "UNSAFE_MINOR" or rule_result.confidence >= threshold):
        return rule_result

    log.info(
        "Intent rules inconclusive (rule=%s), falling back to LLM",
        rule_result.intent if rule_result else None,
    )
    try:
        llm_result = await classify_intent_llm(
            normalized,
            lang=lang,
            context=context,
            creator_id=creator_id,
            fan_id=fan_id,
            llm=llm,
        )
    except Exception as e:
        log.exception(f"Intent LLM fallback crashed: {e}")
        if rule_result:
            rule_result.signals["fallback_reason"] = "fallback_error"
            return rule_result
        return IntentResult(
            intent="OTHER",
            confidence=LLM_FAILED_CONFIDENCE,
            signals={"reason": "fallback_error"},
        )

    if rule_result and llm_result.signals.get("reason") in _DEGRADED_REASONS:
        rule_result.signals["fallback_reason"] = llm_result.signals["reason"]
        rule_result.error_code = llm_result.error_code
        return rule_result

    return llm_result
