import re
import logging
from typing import Any, Iterable, Sequence


_EMAIL_RE = re.compile(r"[\w\.-]+@[\w\.-]+\.\w+")
_PHONE_RE = re.compile(r"\+?\d[\d\s\-]{7,}\d")


def _redact(text: str, extra_patterns: Iterable[re.Pattern[str]] | None = None) -> str:
    if not text:
        return text
    redacted = _EMAIL_RE.sub("<redacted_email>", text)
    redacted = _PHONE_RE.sub("<redacted_phone>", redacted)
    if extra_patterns:
        for pat in extra_patterns:
            redacted = pat.sub("<redacted>", redacted)
    return redacted


def _truncate(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    head = max_chars // 2
    tail = max_chars - head
    return f"{text[:head]}\n...<truncated>...\n{text[-tail:]}"


def log_prompt(
    log: logging.Logger,
    messages: Sequence[tuple[str, str]],
    *,
    cid: str = "",
    max_chars: int = 4000,
    redact_patterns: Iterable[re.Pattern[str]] | None = None,
    **kwargs: Any,
) -> None:
    """Logs (role, content) chat messages at debug level, redacted and truncated."""
    if not log.isEnabledFor(logging.DEBUG):
        return
    rendered = "\n".join(f"[{role}] {content}" for role, content in messages)
    rendered = _redact(rendered, redact_patterns)
    rendered = _truncate(rendered, max_chars)
    extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
    log.debug("[%s] ==== PROMPT %s ====\n%s", cid, extra, rendered)
