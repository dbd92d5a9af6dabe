import json
from datetime import datetime, timedelta, timezone

import pytest

from cortex.jobs.evaluate_fan import evaluate, main


def _payload():
    recent = datetime.now(timezone.utc) - timedelta(hours=1)
    return {
        "fan": {"days_left": 2, "active_grant_types": ["MONTHLY"], "language": "es"},
        "messages": [
            {"from": "fan", "text": "hola guapa", "created_at": recent.isoformat()},
            {"from": "creator", "text": "hola!", "created_at": recent.isoformat()},
        ],
        "purchases": [],
        "latest_message": "hola, cuánto cuesta?",
    }


@pytest.mark.asyncio
async def test_evaluate_runs_the_whole_pipeline():
    result = await evaluate(_payload())

    assert result["intent"]["intent"] == "PRICE_ASK"
    assert result["heat"]["label"] in ("COLD", "WARM", "HOT")
    assert result["state"]["state"] == "near_expiry"
    assert result["state"]["objective"] == "renewal"
    assert result["suggestion"]["next_action_key"] == "OFFER_EXTRA"
    assert result["next_action"]["source"] == "suggested"
    assert result["next_action"]["action_key"] == "OFFER_EXTRA"


@pytest.mark.asyncio
async def test_evaluate_without_latest_message():
    payload = _payload()
    del payload["latest_message"]

    result = await evaluate(payload, has_unread_inbound=True)

    assert result["intent"] is None
    assert result["next_action"]["action_key"] == "REPLY"


def test_main_prints_json(tmp_path, capsys):
    snapshot = tmp_path / "fan.json"
    snapshot.write_text(json.dumps(_payload()), encoding="utf-8")

    assert main([str(snapshot), "--lang", "en"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["intent"]["intent"] == "PRICE_ASK"
    assert output["next_action"]["language"] == "en"
    assert output["suggestion"]["next_action_label"] == "Offer extra"


def test_main_rejects_bad_input(tmp_path):
    missing = tmp_path / "missing.json"
    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"purchases": [{"amount": 5}]}), encoding="utf-8")

    assert main([str(missing)]) == 1
    assert main([str(invalid)]) == 1
