import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from cortex.intent.provider import request_completion
from cortex.schemas.labels import INTENT_VALUES
from cortex.schemas.results import IntentResult
from cortex.utils.prompt_logging import log_prompt

log = logging.getLogger("cortex-intent-llm")

DEFAULT_LLM_CONFIDENCE = 0.4
LLM_FAILED_CONFIDENCE = 0.3
PARSE_FAILED_CONFIDENCE = 0.35

SYSTEM_PROMPT = (
    "Eres un clasificador de intención. Devuelve SOLO JSON válido con schema "
    '{"intent":string,"confidence":0..1,"signals":{}}. No añadas texto extra.'
)


def build_user_prompt(text: str, lang: Optional[str], context: Optional[Sequence[str]]) -> str:
    lines = [f"Texto ({lang or 'es'}): {text}"]
    if context:
        lines.append("Contexto previo:\n" + "\n".join(f"- {line}" for line in context))
    lines.append(f"Claves válidas: {', '.join(INTENT_VALUES)}.")
    lines.append("Si es menor de edad (<18), intent=UNSAFE_MINOR y confidence alta.")
    lines.append("Si no estás seguro, usa intent OTHER con confidence baja.")
    return "\n".join(lines)


def _load_json_object(content: str) -> Optional[Dict[str, Any]]:
    content = content.strip()

    if "```" in content:
        for part in content.split("```"):
            part = part.strip()
            if part.lower().startswith("json"):
                part = part[4:].strip()
            if part.startswith("{"):
                try:
                    return json.loads(part)
                except json.JSONDecodeError:
                    continue

    start = content.find("{")
    end = content.rfind("}") + 1
    if start != -1 and end > start:
        try:
            return json.loads(content[start:end])
        except json.JSONDecodeError:
            pass

    return None


def parse_intent_response(raw: Optional[str]) -> Optional[IntentResult]:
    """
    Untrusted model output -> IntentResult, or None when it does not hold a
    JSON object with a valid intent label.
    """
    if not raw:
        return None
    parsed = _load_json_object(raw)
    if not isinstance(parsed, dict):
        return None

    intent = parsed.get("intent")
    intent = intent.strip().upper() if isinstance(intent, str) else ""
    if intent not in INTENT_VALUES:
        return None

    confidence = parsed.get("confidence")
    if (
        isinstance(confidence, bool)
        or not isinstance(confidence, (int, float))
        or not 0 <= confidence <= 1
    ):
        confidence = DEFAULT_LLM_CONFIDENCE

    signals = parsed.get("signals")
    return IntentResult(
        intent=intent,
        confidence=float(confidence),
        signals=dict(signals) if isinstance(signals, dict) else {},
    )


async def classify_intent_llm(
    text: str,
    lang: Optional[str] = None,
    context: Optional[Sequence[str]] = None,
    creator_id: Optional[str] = None,
    fan_id: Optional[str] = None,
    llm: Any = None,
) -> IntentResult:
    messages: List[tuple[str, str]] = [
        ("system", SYSTEM_PROMPT),
        ("human", build_user_prompt(text, lang, context)),
    ]
    cid = f"{creator_id or '-'}:{fan_id or '-'}"
    log_prompt(log, messages, cid=cid)

    completion = await request_completion(messages, llm=llm)
    if not completion.ok or not completion.text:
        log.info(
            "[%s] Intent LLM unavailable provider=%s error=%s",
            cid, completion.provider, completion.error_code,
        )
        return IntentResult(
            intent="OTHER",
            confidence=LLM_FAILED_CONFIDENCE,
            signals={"reason": "llm_failed", "provider": completion.provider},
            error_code=completion.error_code,
        )

    parsed = parse_intent_response(completion.text)
    if parsed:
        parsed.signals.setdefault("source", "llm")
        return parsed

    log.warning(f"[{cid}] Failed to parse intent response as JSON: {completion.text[:200]}")
    return IntentResult(
        intent="OTHER",
        confidence=PARSE_FAILED_CONFIDENCE,
        signals={"reason": "parse_failed", "provider": completion.provider},
    )
