"""
Runs the whole decision pipeline for one fan snapshot and prints the result.

    python -m cortex.jobs.evaluate_fan snapshot.json [--lang en] [--unread]

The snapshot is a JSON object with `fan` (fan attributes), optional
`messages`, `purchases` and `latest_message` (text to classify).
"""
import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from cortex.core.config import settings
from cortex.heat import compute_heat
from cortex.intent import classify_intent
from cortex.manager import derive_fan_state, get_fan_suggestions, summarize_next_action
from cortex.schemas.fan import FanSnapshot, Message, Purchase

log = logging.getLogger("cortex-evaluate")


async def evaluate(payload: Dict[str, Any], lang: str | None = None, has_unread_inbound: bool = False) -> Dict[str, Any]:
    fan = FanSnapshot.model_validate(payload.get("fan") or {})
    messages = [Message.model_validate(m) for m in payload.get("messages") or []]
    purchases = [Purchase.model_validate(p) for p in payload.get("purchases") or []]
    language = lang or fan.language

    intent = None
    latest = payload.get("latest_message")
    if latest:
        context = [m.text for m in messages[-5:] if m.text]
        intent = await classify_intent(latest, lang=language, context=context)
        fan.last_intent_key = intent.intent

    heat = compute_heat(messages or fan.messages, purchases, fan.membership_status, fan.last_seen_at)
    if fan.temperature_score is None and fan.heat_score is None:
        fan.heat_score = heat.score

    state = derive_fan_state(fan, messages=messages, lang=language)
    suggestion = get_fan_suggestions(
        language=language,
        temperature_bucket=fan.temperature_bucket or heat.label,
        last_intent_key=fan.last_intent_key,
        next_action=fan.next_action,
        membership_status=fan.membership_status,
        days_left=fan.days_left,
        last_purchase_at=fan.last_purchase_at,
        last_inbound_at=fan.last_inbound_at,
    )
    summary = summarize_next_action(fan, lang=language, has_unread_inbound=has_unread_inbound)

    return {
        "intent": asdict(intent) if intent else None,
        "heat": asdict(heat),
        "state": asdict(state),
        "suggestion": asdict(suggestion),
        "next_action": asdict(summary),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fan next-action evaluator")
    parser.add_argument("snapshot", type=Path, help="JSON file with the fan snapshot")
    parser.add_argument("--lang", default=None, help="Operator language (es/en)")
    parser.add_argument("--unread", action="store_true", help="Fan has unread inbound messages")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        payload = json.loads(args.snapshot.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        log.error("Cannot read snapshot %s: %s", args.snapshot, e)
        return 1

    try:
        result = asyncio.run(evaluate(payload, lang=args.lang, has_unread_inbound=args.unread))
    except ValidationError as e:
        log.error("Invalid snapshot: %s", e)
        return 1

    json.dump(result, sys.stdout, ensure_ascii=False, indent=2, default=str)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
