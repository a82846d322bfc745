from notemate.models.deck import Deck, DeckCreate, DeckStats, Visibility
from notemate.models.flashcard import (
    CardType,
    Flashcard,
    FlashcardCreate,
    FlashcardUpdate,
    LeitnerState,
    Outcome,
    ReviewRequest,
    ReviewResult,
    ReviewStats,
)

__all__ = [
    "CardType",
    "Deck",
    "DeckCreate",
    "DeckStats",
    "Flashcard",
    "FlashcardCreate",
    "FlashcardUpdate",
    "LeitnerState",
    "Outcome",
    "ReviewRequest",
    "ReviewResult",
    "ReviewStats",
    "Visibility",
]
