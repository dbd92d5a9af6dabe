from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from cortex.schemas.fan import Message
from cortex.utils.timestamps import ensure_utc


def count_intents(
    messages: Iterable[Message],
    days: int = 7,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Per-intent counts of already-classified messages within the last `days`.
    Messages without a recoverable timestamp are counted; older ones are skipped.
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)

    counts: Counter = Counter()
    for msg in messages:
        if not msg.intent_key:
            continue
        ts = msg.timestamp()
        if ts and ts < cutoff:
            continue
        counts[msg.intent_key.strip().upper() or "OTHER"] += 1
    return dict(counts)
