"""
Leitner box scheduler.

Five boxes with review intervals of 1, 2, 4, 8 and 16 days. A correct recall
("gotit") moves a card up one box (clamped at the last one); a failure
("again") sends it back to box 1. Everything here is pure: callers supply
the current time and persist the result.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from notemate.models.flashcard import Outcome

MIN_BOX = 1
MAX_BOX = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_box(box: int, outcome: Outcome) -> int:
    if outcome is Outcome.AGAIN:
        return MIN_BOX
    return min(MAX_BOX, max(MIN_BOX, box) + 1)


def interval_for_box(box: int) -> timedelta:
    return timedelta(days=2 ** (box - 1))


def schedule(box: int, outcome: Outcome, now: datetime) -> tuple[int, datetime]:
    """Return (new_box, next_review_at) for a card reviewed at `now`."""
    new_box = next_box(box, outcome)
    return new_box, now + interval_for_box(new_box)
