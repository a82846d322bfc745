"""
Deck router.

Endpoints:
  GET    /decks/                 — most recent decks
  POST   /decks/                 — create a deck
  GET    /decks/{id}             — single deck
  DELETE /decks/{id}             — delete a deck and its cards
  GET    /decks/{id}/cards       — all cards of a deck, newest first
  POST   /decks/{id}/cards       — author a card (box 1, due now)
  GET    /decks/{id}/due         — cards due for review, oldest first
  GET    /decks/{id}/stats       — total, due and per-box counts
"""
from __future__ import annotations

import logging
from datetime import datetime

import aiosqlite
from fastapi import APIRouter, Depends, Query

from notemate.db.sqlite import (
    create_deck,
    create_flashcard,
    delete_deck,
    get_db,
    get_deck,
    get_deck_stats,
    list_decks,
    list_flashcards_for_deck,
)
from notemate.models.deck import Deck, DeckCreate, DeckStats
from notemate.models.flashcard import Flashcard, FlashcardCreate
from notemate.routers.deps import engine_errors, get_clock
from notemate.services.errors import DeckNotFoundError
from notemate.services.review import list_due_cards, validate_identifier

logger = logging.getLogger(__name__)
router = APIRouter()


async def _require_deck(db: aiosqlite.Connection, deck_id: str) -> Deck:
    async with engine_errors(f"loading deck {deck_id}"):
        validate_identifier(deck_id, "deck")
        deck = await get_deck(db, deck_id)
        if deck is None:
            raise DeckNotFoundError(deck_id)
    return deck


@router.get("/", response_model=list[Deck])
async def list_all(db: aiosqlite.Connection = Depends(get_db)) -> list[Deck]:
    async with engine_errors("listing decks"):
        return await list_decks(db)


@router.post("/", response_model=Deck, status_code=201)
async def create(
    body: DeckCreate, db: aiosqlite.Connection = Depends(get_db)
) -> Deck:
    async with engine_errors("creating deck"):
        deck = await create_deck(db, body)
    logger.info("Created deck %s (%s)", deck.id, deck.name)
    return deck


@router.get("/{deck_id}", response_model=Deck)
async def get_one(deck_id: str, db: aiosqlite.Connection = Depends(get_db)) -> Deck:
    return await _require_deck(db, deck_id)


@router.delete("/{deck_id}", status_code=204)
async def remove(deck_id: str, db: aiosqlite.Connection = Depends(get_db)) -> None:
    await _require_deck(db, deck_id)
    async with engine_errors(f"deleting deck {deck_id}"):
        await delete_deck(db, deck_id)
    logger.info("Deleted deck %s", deck_id)


@router.get("/{deck_id}/cards", response_model=list[Flashcard])
async def list_cards(
    deck_id: str, db: aiosqlite.Connection = Depends(get_db)
) -> list[Flashcard]:
    await _require_deck(db, deck_id)
    async with engine_errors(f"listing cards of deck {deck_id}"):
        return await list_flashcards_for_deck(db, deck_id)


@router.post("/{deck_id}/cards", response_model=Flashcard, status_code=201)
async def create_card(
    deck_id: str,
    body: FlashcardCreate,
    db: aiosqlite.Connection = Depends(get_db),
    now: datetime = Depends(get_clock),
) -> Flashcard:
    await _require_deck(db, deck_id)
    async with engine_errors(f"creating card in deck {deck_id}"):
        return await create_flashcard(db, deck_id, body, now)


@router.get("/{deck_id}/due", response_model=list[Flashcard])
async def get_due(
    deck_id: str,
    limit: int | None = Query(default=None, ge=1),
    db: aiosqlite.Connection = Depends(get_db),
    now: datetime = Depends(get_clock),
) -> list[Flashcard]:
    """Return cards due for review now, longest overdue first."""
    async with engine_errors(f"listing due cards of deck {deck_id}"):
        return await list_due_cards(db, deck_id, now=now, limit=limit)


@router.get("/{deck_id}/stats", response_model=DeckStats)
async def stats(
    deck_id: str,
    db: aiosqlite.Connection = Depends(get_db),
    now: datetime = Depends(get_clock),
) -> DeckStats:
    await _require_deck(db, deck_id)
    async with engine_errors(f"computing stats of deck {deck_id}"):
        return await get_deck_stats(db, deck_id, now)
