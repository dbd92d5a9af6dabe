from datetime import timedelta

from cortex.manager import summarize_next_action
from cortex.manager.next_action import get_manual_next_action_label, is_suggested_action_key
from cortex.schemas import FanSnapshot


def test_unread_inbound_always_means_reply():
    fan = FanSnapshot(next_action_note="Mandar audio", temperature_bucket="HOT")

    summary = summarize_next_action(fan, has_unread_inbound=True)

    assert summary.needs_action is True
    assert summary.action_key == "REPLY"
    assert summary.action_label == "Responder"
    assert summary.source == "reply"


def test_reply_in_english():
    summary = summarize_next_action(FanSnapshot(), lang="en-US", has_unread_inbound=True)

    assert summary.action_label == "Reply"
    assert summary.language == "en"


def test_manual_note_strips_legacy_schedule():
    fan = FanSnapshot(next_action_note="Mandar audio (para 2026-10-20 18:00)", temperature_bucket="HOT")

    summary = summarize_next_action(fan)

    assert summary.source == "manual"
    assert summary.action_key is None
    assert summary.action_label == "Mandar audio"
    assert summary.needs_action is True


def test_generic_note_with_due_date():
    fan = FanSnapshot(next_action_note="Seguimiento", next_action_at="2026-10-20")

    summary = summarize_next_action(fan)

    assert summary.source == "manual"
    assert summary.action_label == "Seguimiento (sin nota)"


def test_generic_note_without_date_defers_to_suggestion():
    fan = FanSnapshot(next_action_note="follow-up", temperature_bucket="WARM")

    summary = summarize_next_action(fan)

    assert summary.source == "suggested"
    assert summary.action_key == "BUILD_RAPPORT"
    assert summary.action_label == "Construir rapport"


def test_free_text_next_action_counts_as_note():
    fan = FanSnapshot(next_action="Preguntar por el viaje")

    assert get_manual_next_action_label(fan) == "Preguntar por el viaje"


def test_suggested_key_in_next_action_is_an_override():
    fan = FanSnapshot(next_action="offer_extra", temperature_bucket="COLD")

    summary = summarize_next_action(fan)

    assert get_manual_next_action_label(fan) == ""
    assert summary.source == "suggested"
    assert summary.action_key == "OFFER_EXTRA"


def test_nothing_to_do():
    summary = summarize_next_action(FanSnapshot())

    assert summary.needs_action is False
    assert summary.action_key is None
    assert summary.action_label == "—"
    assert summary.source == "none"
    assert summary.language == "es"


def test_language_inferred_from_last_inbound():
    fan = FanSnapshot(last_inbound_text="hello, thanks! how are you", temperature_bucket="COLD")

    summary = summarize_next_action(fan)

    assert summary.language == "en"
    assert summary.action_label == "Break the ice"


def test_explicit_language_beats_inference():
    fan = FanSnapshot(preferred_language="es-ES", last_inbound_text="hello, thanks!")

    assert summarize_next_action(fan).language == "es"


def test_heat_score_used_when_temperature_missing():
    summary = summarize_next_action(FanSnapshot(heat_score=75))

    assert summary.action_key == "OFFER_EXTRA"


def test_recent_purchase_overrides_intent(now):
    fan = FanSnapshot(last_intent_key="OBJECTION", last_purchase_at=now - timedelta(hours=3))

    summary = summarize_next_action(fan, now=now)

    assert summary.action_key == "THANK_DELIVERY"


def test_is_suggested_action_key():
    assert is_suggested_action_key(" safety ")
    assert not is_suggested_action_key("THANK_DELIVERY")
    assert not is_suggested_action_key(None)
