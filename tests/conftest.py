from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from cortex.core.config import settings
from cortex.schemas.fan import Message


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeLLM:
    """Stands in for ChatOpenAI: records prompts and replies with canned content."""

    def __init__(self, content: str = "", error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[list[tuple[str, str]]] = []

    async def ainvoke(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=self.content)


@pytest.fixture(autouse=True)
def demo_provider(monkeypatch):
    monkeypatch.setattr(settings, "AI_PROVIDER", "demo")
    monkeypatch.setattr(settings, "INTENT_MIN_RULE_CONFIDENCE", 0.75)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def fake_llm():
    def _make(content: str = "", error: Exception | None = None) -> FakeLLM:
        return FakeLLM(content=content, error=error)

    return _make


@pytest.fixture
def fan_message():
    def _make(ago: timedelta, intent: str | None = None, use_id: bool = False, sender: str = "fan") -> Message:
        ts = NOW - ago
        if use_id:
            return Message(id=f"fan42-{int(ts.timestamp() * 1000)}", sender=sender, text="...", intent_key=intent)
        return Message(sender=sender, text="...", intent_key=intent, created_at=ts)

    return _make
