from datetime import timedelta

import pytest

from cortex.heat import compute_temperature_from_message, resolve_next_action


def test_decay_then_boosts(now):
    result = compute_temperature_from_message(
        previous_score=40,
        last_inbound_at=now - timedelta(days=2, hours=3),
        intent_key="buy_now",
        now=now,
    )

    assert result.score == 40 - 10 + 8 + 35
    assert result.bucket == "HOT"
    assert result.reasons == ["Decaimiento -10", "Inbound +8", "Intent BUY_NOW +35"]


def test_unsafe_intent_resets_to_cold(now):
    result = compute_temperature_from_message(previous_score=90, intent_key="UNSAFE_MINOR", now=now)

    assert result.score == 0
    assert result.bucket == "COLD"
    assert result.reasons == ["Unsafe intent"]


def test_recent_purchase_is_clamped(now):
    result = compute_temperature_from_message(
        previous_score=80,
        last_inbound_at=now.isoformat(),
        intent_key="PRICE_ASK",
        last_purchase_at=now - timedelta(days=1),
        now=now,
    )

    assert result.score == 100
    assert result.reasons == ["Inbound +8", "Intent PRICE_ASK +20", "Compra reciente +50"]


def test_missing_previous_score_starts_from_zero(now):
    result = compute_temperature_from_message(previous_score=float("nan"), now=now)

    assert result.score == 8
    assert result.bucket == "COLD"


@pytest.mark.parametrize(
    "intent, bucket, expected",
    [
        ("UNSAFE_MINOR", "HOT", "SAFETY"),
        ("support", None, "SUPPORT"),
        ("BUY_NOW", "COLD", "SEND_PAYMENT_LINK"),
        ("PRICE_ASK", None, "OFFER_EXTRA"),
        ("FLIRT", "HOT", "PUSH_MONTHLY"),
        (None, "warm", "BUILD_RAPPORT"),
        ("GREETING", "COLD", "BREAK_ICE"),
        (None, None, "BUILD_RAPPORT"),
    ],
)
def test_resolve_next_action(intent, bucket, expected):
    assert resolve_next_action(intent, bucket) == expected
