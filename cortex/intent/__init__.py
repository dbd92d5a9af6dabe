from cortex.intent.classifier import classify_intent
from cortex.intent.keywords import detect_intent_rules, normalize_intent_text
from cortex.intent.remote import classify_intent_llm, parse_intent_response
from cortex.intent.stats import count_intents

__all__ = [
    "classify_intent",
    "detect_intent_rules",
    "normalize_intent_text",
    "classify_intent_llm",
    "parse_intent_response",
    "count_intents",
]
