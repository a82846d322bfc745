from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class CardType(str, Enum):
    BASIC = "basic"
    CLOZE = "cloze"
    MCQ = "mcq"


class Outcome(str, Enum):
    AGAIN = "again"
    GOTIT = "gotit"


class LeitnerState(BaseModel):
    box: int = Field(ge=1, le=5)
    next_review_at: datetime  # UTC; card is due once this has passed


class ReviewStats(BaseModel):
    correct: int = 0
    incorrect: int = 0


class Flashcard(BaseModel):
    id: str
    deck_id: str
    type: CardType
    prompt: str
    answer: str
    choices: list[str]
    difficulty: int         # 1=easy, 2=medium, 3=hard
    leitner: LeitnerState
    stats: ReviewStats
    version: int            # bumped on every review write
    created_at: datetime
    updated_at: datetime


class FlashcardCreate(BaseModel):
    type: CardType = CardType.BASIC
    prompt: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    choices: list[str] = []
    difficulty: Literal[1, 2, 3] = 2


class FlashcardUpdate(BaseModel):
    prompt: str | None = Field(default=None, min_length=1)
    answer: str | None = Field(default=None, min_length=1)
    choices: list[str] | None = None
    difficulty: Literal[1, 2, 3] | None = None


class ReviewRequest(BaseModel):
    # Untyped so any value, of any JSON type, reaches the review service
    # and is rejected there as a validation error.
    result: Any = None


class ReviewResult(BaseModel):
    ok: bool = True
    card: Flashcard
