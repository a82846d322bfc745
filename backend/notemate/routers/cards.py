"""
Card router.

Endpoints:
  POST   /cards/{id}/review  — submit "again" or "gotit", run the Leitner step
  GET    /cards/{id}         — single card
  PATCH  /cards/{id}         — edit prompt / answer / choices / difficulty
  DELETE /cards/{id}         — delete card
"""
from __future__ import annotations

from datetime import datetime

import aiosqlite
from fastapi import APIRouter, Depends

from notemate.db.sqlite import (
    delete_flashcard,
    get_db,
    get_flashcard,
    update_flashcard_content,
)
from notemate.models.flashcard import (
    Flashcard,
    FlashcardUpdate,
    ReviewRequest,
    ReviewResult,
)
from notemate.routers.deps import engine_errors, get_clock
from notemate.services.errors import CardNotFoundError
from notemate.services.review import review_card, validate_identifier

router = APIRouter()


@router.post("/{card_id}/review", response_model=ReviewResult)
async def review(
    card_id: str,
    body: ReviewRequest | None = None,
    db: aiosqlite.Connection = Depends(get_db),
    now: datetime = Depends(get_clock),
) -> ReviewResult:
    async with engine_errors(f"reviewing card {card_id}"):
        card = await review_card(db, card_id, body.result if body else None, now=now)
    return ReviewResult(card=card)


@router.get("/{card_id}", response_model=Flashcard)
async def get_card(
    card_id: str, db: aiosqlite.Connection = Depends(get_db)
) -> Flashcard:
    async with engine_errors(f"loading card {card_id}"):
        card = await get_flashcard(db, validate_identifier(card_id, "card"))
        if not card:
            raise CardNotFoundError(card_id)
    return card


@router.patch("/{card_id}", response_model=Flashcard)
async def edit_card(
    card_id: str,
    body: FlashcardUpdate,
    db: aiosqlite.Connection = Depends(get_db),
) -> Flashcard:
    async with engine_errors(f"editing card {card_id}"):
        updated = await update_flashcard_content(
            db, validate_identifier(card_id, "card"), body
        )
        if not updated:
            raise CardNotFoundError(card_id)
    return updated


@router.delete("/{card_id}", status_code=204)
async def remove_card(
    card_id: str, db: aiosqlite.Connection = Depends(get_db)
) -> None:
    async with engine_errors(f"deleting card {card_id}"):
        deleted = await delete_flashcard(db, validate_identifier(card_id, "card"))
        if not deleted:
            raise CardNotFoundError(card_id)
