import logging
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import httpx
import openai
from langchain_openai import ChatOpenAI

from cortex.core.config import settings

log = logging.getLogger("cortex-provider")

ChatMessages = Sequence[Tuple[str, str]]

PROVIDERS = ("openai", "ollama", "demo")


@dataclass
class CompletionResult:
    ok: bool
    text: str
    provider: str
    model: Optional[str] = None
    latency_ms: int = 0
    error_code: Optional[str] = None
    status: Optional[int] = None
    error_message: Optional[str] = None


def normalize_provider(raw: Optional[str]) -> str:
    normalized = (raw or "").strip().lower()
    if normalized in ("openai", "live"):
        return "openai"
    if normalized == "ollama":
        return "ollama"
    return "demo"


_INTENT_LLM: Optional[ChatOpenAI] = None


def get_intent_llm() -> Optional[ChatOpenAI]:
    global _INTENT_LLM
    if _INTENT_LLM is None and settings.OPENAI_API_KEY:
        _INTENT_LLM = ChatOpenAI(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            temperature=settings.INTENT_LLM_TEMPERATURE,
            max_tokens=settings.INTENT_LLM_MAX_TOKENS,
            timeout=settings.INTENT_LLM_TIMEOUT_S,
        )
    return _INTENT_LLM


def classify_llm_error(exc: BaseException) -> Tuple[str, Optional[int]]:
    """Maps provider exceptions to (error_code, http status)."""
    if isinstance(exc, openai.RateLimitError):
        return "rate_limited", 429
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return "auth_failed", getattr(exc, "status_code", None)
    if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException)):
        return "timeout", None
    if isinstance(exc, openai.APIStatusError):
        return "http_error", exc.status_code
    if isinstance(exc, (openai.APIConnectionError, httpx.HTTPError)):
        return "unreachable", None
    return "llm_error", None


def _status_error_code(status: int) -> str:
    if status == 429:
        return "rate_limited"
    if status in (401, 403):
        return "auth_failed"
    return "http_error"


async def _invoke_chat_model(llm: Any, messages: ChatMessages, provider: str) -> CompletionResult:
    started = time.monotonic()
    model = getattr(llm, "model_name", None) or getattr(llm, "model", None)
    try:
        response = await llm.ainvoke(list(messages))
    except Exception as e:
        error_code, status = classify_llm_error(e)
        log.warning("Intent LLM call failed (%s): %s", error_code, e)
        return CompletionResult(
            ok=False,
            text="",
            provider=provider,
            model=model,
            latency_ms=int((time.monotonic() - started) * 1000),
            error_code=error_code,
            status=status,
            error_message=str(e),
        )

    content = getattr(response, "content", response)
    text = content if isinstance(content, str) else ""
    return CompletionResult(
        ok=bool(text.strip()),
        text=text,
        provider=provider,
        model=model,
        latency_ms=int((time.monotonic() - started) * 1000),
        error_code=None if text.strip() else "empty_response",
    )


async def _request_ollama(messages: ChatMessages) -> CompletionResult:
    started = time.monotonic()
    url = settings.OLLAMA_BASE_URL.rstrip("/") + "/v1/chat/completions"
    headers = {"Content-Type": "application/json"}
    if settings.OLLAMA_API_KEY:
        headers["Authorization"] = f"Bearer {settings.OLLAMA_API_KEY}"

    try:
        async with httpx.AsyncClient(timeout=settings.INTENT_LLM_TIMEOUT_S) as client:
            response = await client.post(
                url,
                headers=headers,
                json={
                    "model": settings.OLLAMA_MODEL,
                    "messages": [
                        {"role": "user" if role == "human" else role, "content": content}
                        for role, content in messages
                    ],
                    "temperature": settings.INTENT_LLM_TEMPERATURE,
                    "max_tokens": settings.INTENT_LLM_MAX_TOKENS,
                    "stream": False,
                },
            )
    except httpx.HTTPError as e:
        error_code, status = classify_llm_error(e)
        log.warning("Ollama request failed (%s): %s", error_code, e)
        return CompletionResult(
            ok=False,
            text="",
            provider="ollama",
            model=settings.OLLAMA_MODEL,
            latency_ms=int((time.monotonic() - started) * 1000),
            error_code=error_code,
            status=status,
            error_message=str(e),
        )

    latency_ms = int((time.monotonic() - started) * 1000)
    if response.status_code != 200:
        log.error(f"Ollama API error: {response.status_code} - {response.text[:200]}")
        return CompletionResult(
            ok=False,
            text="",
            provider="ollama",
            model=settings.OLLAMA_MODEL,
            latency_ms=latency_ms,
            error_code=_status_error_code(response.status_code),
            status=response.status_code,
            error_message=response.text[:200],
        )

    try:
        data = response.json()
        content = data.get("choices", [{}])[0].get("message", {}).get("content", "") or ""
    except (ValueError, AttributeError, IndexError) as e:
        log.warning("Ollama returned a malformed body: %s", e)
        content = ""

    return CompletionResult(
        ok=bool(content.strip()),
        text=content,
        provider="ollama",
        model=settings.OLLAMA_MODEL,
        latency_ms=latency_ms,
        status=response.status_code,
        error_code=None if content.strip() else "empty_response",
    )


async def request_completion(messages: List[Tuple[str, str]], llm: Any = None) -> CompletionResult:
    """
    Sends (role, content) chat messages to the configured completion provider.
    An injected `llm` (anything with an async `ainvoke`) takes precedence over settings.
    Never raises; failures come back as CompletionResult(ok=False, error_code=...).
    """
    if llm is not None:
        return await _invoke_chat_model(llm, messages, provider="injected")

    provider = normalize_provider(settings.AI_PROVIDER)
    if provider == "openai":
        model = get_intent_llm()
        if model is None:
            log.warning("AI_PROVIDER=openai but OPENAI_API_KEY is not configured")
            return CompletionResult(ok=False, text="", provider=provider, error_code="provider_unconfigured")
        return await _invoke_chat_model(model, messages, provider=provider)
    if provider == "ollama":
        return await _request_ollama(messages)

    return CompletionResult(ok=False, text="", provider="demo", error_code="provider_unconfigured")
