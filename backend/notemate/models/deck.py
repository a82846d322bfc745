from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Visibility(str, Enum):
    PRIVATE = "private"
    WORKSPACE = "workspace"


class DeckCreate(BaseModel):
    name: str = Field(min_length=1)
    visibility: Visibility = Visibility.PRIVATE


class Deck(BaseModel):
    id: str
    name: str
    visibility: Visibility
    created_at: datetime
    updated_at: datetime


class DeckStats(BaseModel):
    deck_id: str
    total: int
    due: int
    boxes: dict[int, int]   # box number -> card count, every box present
    correct: int
    incorrect: int
