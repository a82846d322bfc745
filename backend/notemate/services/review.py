"""
Review engine operations.

  review_card     — apply one outcome to one card and persist it
  list_due_cards  — cards of a deck whose next review has passed, oldest first

Validation happens before the store is touched. Storage failures are wrapped
in StorageError and surfaced without retry: a review is a read-modify-write,
so the only repeat allowed is the re-read after losing a compare-and-swap.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import aiosqlite

from notemate.config import settings
from notemate.db.sqlite import (
    compare_and_set_review_state,
    get_deck,
    get_due_flashcards,
    get_flashcard,
)
from notemate.models.flashcard import Flashcard, Outcome
from notemate.services.card_locks import card_lock
from notemate.services.errors import (
    CardNotFoundError,
    DeckNotFoundError,
    InvalidIdentifierError,
    InvalidOutcomeError,
    ReviewConflictError,
    StorageError,
)
from notemate.services.leitner import schedule, utcnow

logger = logging.getLogger(__name__)


def parse_outcome(value: object) -> Outcome:
    try:
        return Outcome(value)
    except (ValueError, TypeError):
        raise InvalidOutcomeError(value) from None


def validate_identifier(value: object, entity: str) -> str:
    if not isinstance(value, str):
        raise InvalidIdentifierError(entity, value)
    try:
        uuid.UUID(value)
    except ValueError:
        raise InvalidIdentifierError(entity, value) from None
    return value


@asynccontextmanager
async def storage_errors(action: str) -> AsyncIterator[None]:
    try:
        yield
    except aiosqlite.Error as e:
        logger.exception("Storage failure while %s", action)
        raise StorageError(f"storage failure while {action}") from e


async def review_card(
    db: aiosqlite.Connection,
    card_id: str,
    outcome: object,
    now: datetime | None = None,
) -> Flashcard:
    """
    Apply a review outcome ("again" or "gotit") to a card.

    Moves the card to its new Leitner box, reschedules it and increments
    exactly one of its correct/incorrect counters. Returns the stored card.
    """
    result = parse_outcome(outcome)
    validate_identifier(card_id, "card")

    async with card_lock(card_id):
        attempts = max(1, settings.review_max_attempts)
        for attempt in range(1, attempts + 1):
            async with storage_errors(f"loading card {card_id}"):
                card = await get_flashcard(db, card_id)
            if card is None:
                raise CardNotFoundError(card_id)

            reviewed_at = now or utcnow()
            new_box, next_review_at = schedule(card.leitner.box, result, reviewed_at)
            correct, incorrect = card.stats.correct, card.stats.incorrect
            if result is Outcome.GOTIT:
                correct += 1
            else:
                incorrect += 1

            async with storage_errors(f"saving review of card {card_id}"):
                applied = await compare_and_set_review_state(
                    db,
                    card_id,
                    card.version,
                    new_box,
                    next_review_at,
                    correct,
                    incorrect,
                )
            if applied:
                logger.info(
                    "Card %s reviewed '%s': box %d -> %d, next review %s",
                    card_id,
                    result.value,
                    card.leitner.box,
                    new_box,
                    next_review_at.isoformat(),
                )
                async with storage_errors(f"loading card {card_id}"):
                    updated = await get_flashcard(db, card_id)
                if updated is None:
                    raise CardNotFoundError(card_id)
                return updated

            logger.warning(
                "Card %s changed during review (attempt %d/%d), re-reading",
                card_id,
                attempt,
                attempts,
            )

    raise ReviewConflictError(card_id, attempts)


async def list_due_cards(
    db: aiosqlite.Connection,
    deck_id: str,
    now: datetime | None = None,
    limit: int | None = None,
) -> list[Flashcard]:
    """Return the deck's due cards, longest overdue first, capped at settings.due_limit."""
    validate_identifier(deck_id, "deck")
    cap = settings.due_limit
    limit = cap if limit is None else max(1, min(limit, cap))

    async with storage_errors(f"listing due cards of deck {deck_id}"):
        if await get_deck(db, deck_id) is None:
            raise DeckNotFoundError(deck_id)
        return await get_due_flashcards(db, deck_id, now or utcnow(), limit)
