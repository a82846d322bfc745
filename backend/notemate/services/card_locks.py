from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

_card_locks: dict[str, asyncio.Lock] = {}
_holders: dict[str, int] = {}


@asynccontextmanager
async def card_lock(card_id: str) -> AsyncIterator[None]:
    """Serialize reviews of one card within this process."""
    lock = _card_locks.setdefault(card_id, asyncio.Lock())
    _holders[card_id] = _holders.get(card_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _holders[card_id] -= 1
        if _holders[card_id] == 0:
            # Nobody holds or waits on it any more
            del _holders[card_id]
            _card_locks.pop(card_id, None)


def active_lock_count() -> int:
    """Number of cards with a review running or queued; reported by /health."""
    return len(_card_locks)
