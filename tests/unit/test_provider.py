import json

import httpx
import openai
import pytest

from cortex.core.config import settings
from cortex.intent import provider
from cortex.intent.provider import classify_llm_error, normalize_provider, request_completion

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", OPENAI_URL))


@pytest.mark.parametrize(
    "raw, expected",
    [("OpenAI", "openai"), ("live", "openai"), (" ollama ", "ollama"), ("demo", "demo"), (None, "demo"), ("grok", "demo")],
)
def test_normalize_provider(raw, expected):
    assert normalize_provider(raw) == expected


@pytest.mark.parametrize(
    "exc, expected",
    [
        (openai.RateLimitError("slow down", response=_response(429), body=None), ("rate_limited", 429)),
        (openai.AuthenticationError("bad key", response=_response(401), body=None), ("auth_failed", 401)),
        (openai.PermissionDeniedError("nope", response=_response(403), body=None), ("auth_failed", 403)),
        (openai.InternalServerError("boom", response=_response(500), body=None), ("http_error", 500)),
        (openai.APITimeoutError(request=httpx.Request("POST", OPENAI_URL)), ("timeout", None)),
        (openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL)), ("unreachable", None)),
        (httpx.ReadTimeout("slow"), ("timeout", None)),
        (httpx.ConnectError("refused"), ("unreachable", None)),
        (ValueError("weird"), ("llm_error", None)),
    ],
)
def test_classify_llm_error(exc, expected):
    assert classify_llm_error(exc) == expected


@pytest.mark.asyncio
async def test_demo_provider_is_unconfigured():
    result = await request_completion([("system", "s"), ("human", "h")])

    assert result.ok is False
    assert result.provider == "demo"
    assert result.error_code == "provider_unconfigured"


@pytest.mark.asyncio
async def test_openai_without_key_is_unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "AI_PROVIDER", "openai")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    monkeypatch.setattr(provider, "_INTENT_LLM", None)

    result = await request_completion([("human", "hola")])

    assert result.provider == "openai"
    assert result.error_code == "provider_unconfigured"


@pytest.mark.asyncio
async def test_injected_model(fake_llm):
    llm = fake_llm('{"intent": "GREETING"}')

    result = await request_completion([("human", "hola")], llm=llm)

    assert result.ok is True
    assert result.provider == "injected"
    assert result.text == '{"intent": "GREETING"}'
    assert llm.calls == [[("human", "hola")]]


@pytest.mark.asyncio
async def test_injected_model_empty_and_failing(fake_llm):
    empty = await request_completion([("human", "hola")], llm=fake_llm("   "))
    failed = await request_completion(
        [("human", "hola")],
        llm=fake_llm(error=openai.RateLimitError("slow down", response=_response(429), body=None)),
    )

    assert (empty.ok, empty.error_code) == (False, "empty_response")
    assert (failed.ok, failed.error_code, failed.status) == (False, "rate_limited", 429)


def _mock_ollama(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(settings, "AI_PROVIDER", "ollama")
    monkeypatch.setattr(settings, "OLLAMA_BASE_URL", "http://ollama.test/")
    monkeypatch.setattr(httpx, "AsyncClient", client_factory)


@pytest.mark.asyncio
async def test_ollama_request(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"intent": "FLIRT"}'}}]})

    _mock_ollama(monkeypatch, handler)

    result = await request_completion([("system", "rules"), ("human", "eres guapa")])

    assert result.ok is True
    assert result.provider == "ollama"
    assert result.text == '{"intent": "FLIRT"}'
    assert seen["url"] == "http://ollama.test/v1/chat/completions"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "rules"},
        {"role": "user", "content": "eres guapa"},
    ]
    assert seen["body"]["stream"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("status, code", [(429, "rate_limited"), (401, "auth_failed"), (502, "http_error")])
async def test_ollama_status_errors(monkeypatch, status, code):
    _mock_ollama(monkeypatch, lambda request: httpx.Response(status, text="nope"))

    result = await request_completion([("human", "hola")])

    assert result.ok is False
    assert result.status == status
    assert result.error_code == code


@pytest.mark.asyncio
async def test_ollama_unreachable(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    _mock_ollama(monkeypatch, handler)

    result = await request_completion([("human", "hola")])

    assert (result.ok, result.error_code) == (False, "unreachable")
