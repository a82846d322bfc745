"""
Error taxonomy of the review engine.

Each error carries a `kind` (the structured error name returned to callers)
and the HTTP status the routers map it to.
"""
from __future__ import annotations


class ReviewEngineError(Exception):
    kind = "internal"
    status_code = 500


class ValidationError(ReviewEngineError):
    """Bad input, rejected before any storage access."""

    kind = "validation"
    status_code = 400


class InvalidOutcomeError(ValidationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__("result must be 'again' or 'gotit'")


class InvalidIdentifierError(ValidationError):
    def __init__(self, entity: str, value: object) -> None:
        self.entity = entity
        self.value = value
        super().__init__(f"invalid {entity} id")


class NotFoundError(ReviewEngineError):
    kind = "not_found"
    status_code = 404


class CardNotFoundError(NotFoundError):
    def __init__(self, card_id: str) -> None:
        self.card_id = card_id
        super().__init__("card not found")


class DeckNotFoundError(NotFoundError):
    def __init__(self, deck_id: str) -> None:
        self.deck_id = deck_id
        super().__init__("deck not found")


class ReviewConflictError(ReviewEngineError):
    """Concurrent writers kept winning the compare-and-swap on a card."""

    kind = "conflict"
    status_code = 409

    def __init__(self, card_id: str, attempts: int) -> None:
        self.card_id = card_id
        self.attempts = attempts
        super().__init__(
            f"card {card_id} was modified concurrently {attempts} times; try again"
        )


class StorageError(ReviewEngineError):
    """The underlying store failed. Never retried by the engine itself."""

    kind = "storage"
    status_code = 503
