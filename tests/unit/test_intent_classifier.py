import httpx
import openai
import pytest

from cortex.intent import classify_intent, parse_intent_response
from cortex.schemas.results import IntentResult


def _rate_limit_error() -> openai.RateLimitError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(429, request=request)
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


@pytest.mark.asyncio
async def test_empty_text_short_circuits(fake_llm):
    llm = fake_llm('{"intent": "FLIRT", "confidence": 0.9}')

    result = await classify_intent("   ", llm=llm)

    assert result.intent == "OTHER"
    assert result.confidence == 0.3
    assert result.signals == {"reason": "empty"}
    assert llm.calls == []


@pytest.mark.asyncio
async def test_confident_rule_skips_remote(fake_llm):
    llm = fake_llm('{"intent": "FLIRT", "confidence": 0.9}')

    result = await classify_intent("Hola, ¿cuánto cuesta?", llm=llm)

    assert result.intent == "PRICE_ASK"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_minor_age_never_reaches_remote(fake_llm):
    llm = fake_llm('{"intent": "BUY_NOW", "confidence": 0.99}')

    result = await classify_intent("tengo 15 años y lo quiero, send link", llm=llm, min_rule_confidence=0.99)

    assert result.intent == "UNSAFE_MINOR"
    assert result.confidence == 0.95
    assert llm.calls == []


@pytest.mark.asyncio
async def test_rule_below_threshold_uses_remote(fake_llm):
    llm = fake_llm('```json\n{"intent": "flirt", "confidence": 0.66, "signals": {"tone": "playful"}}\n```')

    result = await classify_intent(
        "hey there",
        lang="en",
        context=["fan: you look great", "creator: thank you!"],
        min_rule_confidence=0.8,
        llm=llm,
    )

    assert result.intent == "FLIRT"
    assert result.confidence == 0.66
    assert result.signals["tone"] == "playful"

    (system, user), = [tuple(call) for call in llm.calls]
    assert system[0] == "system" and "JSON" in system[1]
    assert "hey there" in user[1]
    assert "Contexto previo" in user[1]
    assert "- fan: you look great" in user[1]
    assert "UNSAFE_MINOR" in user[1]
    assert "<18" in user[1]


@pytest.mark.asyncio
async def test_remote_failure_falls_back_to_rule_result(fake_llm):
    llm = fake_llm(error=_rate_limit_error())

    result = await classify_intent("hey there", min_rule_confidence=0.8, llm=llm)

    assert result.intent == "GREETING"
    assert result.confidence == 0.75
    assert result.error_code == "rate_limited"
    assert result.signals["fallback_reason"] == "llm_failed"


@pytest.mark.asyncio
async def test_remote_failure_without_rule_is_low_confidence_other(fake_llm):
    llm = fake_llm(error=RuntimeError("connection reset"))

    result = await classify_intent("mmm", llm=llm)

    assert result.intent == "OTHER"
    assert result.confidence == 0.3
    assert result.signals["reason"] == "llm_failed"


@pytest.mark.asyncio
async def test_unparseable_remote_answer(fake_llm):
    llm = fake_llm("I think the fan is flirting")

    result = await classify_intent("mmm", llm=llm)

    assert result.intent == "OTHER"
    assert result.confidence == 0.35
    assert result.signals["reason"] == "parse_failed"


@pytest.mark.asyncio
async def test_demo_provider_degrades_without_raising():
    result = await classify_intent("mmm")

    assert result.intent == "OTHER"
    assert result.confidence == 0.3
    assert result.error_code == "provider_unconfigured"


def test_parse_defaults_out_of_range_confidence():
    result = parse_intent_response('{"intent": "BUY_NOW", "confidence": 7}')

    assert result.intent == "BUY_NOW"
    assert result.confidence == 0.4


def test_parse_rejects_unknown_labels_and_garbage():
    assert parse_intent_response('{"intent": "DANCE", "confidence": 0.9}') is None
    assert parse_intent_response("[1, 2, 3]") is None
    assert parse_intent_response("") is None


def test_parse_ignores_non_object_signals():
    result = parse_intent_response('{"intent": "other", "confidence": 0.2, "signals": "n/a"}')

    assert result.intent == "OTHER"
    assert result.signals == {}


@pytest.mark.parametrize("raw, expected", [(1.7, 1.0), (-3, 0.0), (float("nan"), 0.0), (0.5, 0.5)])
def test_confidence_always_within_unit_interval(raw, expected):
    assert IntentResult(intent="OTHER", confidence=raw).confidence == expected
