import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from notemate.config import settings
from notemate.models.deck import Deck, DeckCreate, DeckStats
from notemate.models.flashcard import (
    Flashcard,
    FlashcardCreate,
    FlashcardUpdate,
    LeitnerState,
    ReviewStats,
)

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS decks (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    visibility  TEXT NOT NULL DEFAULT 'private',
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_decks_created ON decks(created_at);

CREATE TABLE IF NOT EXISTS flashcards (
    id             TEXT PRIMARY KEY,
    deck_id        TEXT NOT NULL REFERENCES decks(id) ON DELETE CASCADE,
    type           TEXT NOT NULL DEFAULT 'basic',
    prompt         TEXT NOT NULL,
    answer         TEXT NOT NULL,
    choices        TEXT NOT NULL DEFAULT '[]',
    difficulty     INTEGER NOT NULL DEFAULT 2,
    box            INTEGER NOT NULL DEFAULT 1 CHECK (box BETWEEN 1 AND 5),
    next_review_at TEXT NOT NULL,
    correct        INTEGER NOT NULL DEFAULT 0,
    incorrect      INTEGER NOT NULL DEFAULT 0,
    version        INTEGER NOT NULL DEFAULT 0,
    created_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_flashcards_due ON flashcards(deck_id, next_review_at);
CREATE INDEX IF NOT EXISTS idx_flashcards_box ON flashcards(box);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def format_timestamp(moment: datetime) -> str:
    """Fixed-width UTC ISO string, so text order matches time order."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


# --- Decks ---


def _row_to_deck(row: aiosqlite.Row) -> Deck:
    return Deck(**dict(row))


async def create_deck(db: aiosqlite.Connection, deck: DeckCreate) -> Deck:
    deck_id = str(uuid.uuid4())
    now = _now()
    await db.execute(
        """INSERT INTO decks (id, name, visibility, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?)""",
        (deck_id, deck.name, deck.visibility.value, now, now),
    )
    await db.commit()
    return await get_deck(db, deck_id)  # type: ignore[return-value]


async def get_deck(db: aiosqlite.Connection, deck_id: str) -> Deck | None:
    cursor = await db.execute("SELECT * FROM decks WHERE id = ?", (deck_id,))
    row = await cursor.fetchone()
    if row is None:
        return None
    return _row_to_deck(row)


async def list_decks(db: aiosqlite.Connection, limit: int = 50) -> list[Deck]:
    cursor = await db.execute(
        "SELECT * FROM decks ORDER BY created_at DESC, rowid DESC LIMIT ?",
        (limit,),
    )
    rows = await cursor.fetchall()
    return [_row_to_deck(r) for r in rows]


async def delete_deck(db: aiosqlite.Connection, deck_id: str) -> bool:
    cursor = await db.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Flashcards ---


def _row_to_flashcard(row: aiosqlite.Row) -> Flashcard:
    d = dict(row)
    return Flashcard(
        id=d["id"],
        deck_id=d["deck_id"],
        type=d["type"],
        prompt=d["prompt"],
        answer=d["answer"],
        choices=json.loads(d["choices"] or "[]"),
        difficulty=d["difficulty"],
        leitner=LeitnerState(box=d["box"], next_review_at=d["next_review_at"]),
        stats=ReviewStats(correct=d["correct"], incorrect=d["incorrect"]),
        version=d["version"],
        created_at=d["created_at"],
        updated_at=d["updated_at"],
    )


async def create_flashcard(
    db: aiosqlite.Connection,
    deck_id: str,
    card: FlashcardCreate,
    now: datetime,
) -> Flashcard:
    """Insert a new card in box 1, due immediately, with zeroed stats."""
    card_id = str(uuid.uuid4())
    created = format_timestamp(now)
    await db.execute(
        """INSERT INTO flashcards
           (id, deck_id, type, prompt, answer, choices, difficulty,
            box, next_review_at, correct, incorrect, version, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, 0, 0, 0, ?, ?)""",
        (
            card_id,
            deck_id,
            card.type.value,
            card.prompt,
            card.answer,
            json.dumps(card.choices),
            card.difficulty,
            created,
            created,
            created,
        ),
    )
    await db.commit()
    return await get_flashcard(db, card_id)  # type: ignore[return-value]


async def get_flashcard(db: aiosqlite.Connection, card_id: str) -> Flashcard | None:
    cursor = await db.execute("SELECT * FROM flashcards WHERE id = ?", (card_id,))
    row = await cursor.fetchone()
    return _row_to_flashcard(row) if row else None


async def list_flashcards_for_deck(
    db: aiosqlite.Connection, deck_id: str
) -> list[Flashcard]:
    cursor = await db.execute(
        "SELECT * FROM flashcards WHERE deck_id = ? ORDER BY created_at DESC, rowid DESC",
        (deck_id,),
    )
    rows = await cursor.fetchall()
    return [_row_to_flashcard(r) for r in rows]


async def get_due_flashcards(
    db: aiosqlite.Connection,
    deck_id: str,
    now: datetime,
    limit: int,
) -> list[Flashcard]:
    """Return cards of a deck whose next review is at or before `now`, oldest first."""
    cursor = await db.execute(
        """SELECT * FROM flashcards
           WHERE deck_id = ? AND next_review_at <= ?
           ORDER BY next_review_at ASC, id ASC
           LIMIT ?""",
        (deck_id, format_timestamp(now), limit),
    )
    rows = await cursor.fetchall()
    return [_row_to_flashcard(r) for r in rows]


async def compare_and_set_review_state(
    db: aiosqlite.Connection,
    card_id: str,
    expected_version: int,
    box: int,
    next_review_at: datetime,
    correct: int,
    incorrect: int,
) -> bool:
    """
    Write the scheduling state only if the card is still at `expected_version`.

    Returns False when another writer got there first (or the card is gone).
    """
    cursor = await db.execute(
        """UPDATE flashcards
           SET box = ?, next_review_at = ?, correct = ?, incorrect = ?,
               version = version + 1, updated_at = ?
           WHERE id = ? AND version = ?""",
        (
            box,
            format_timestamp(next_review_at),
            correct,
            incorrect,
            _now(),
            card_id,
            expected_version,
        ),
    )
    await db.commit()
    return cursor.rowcount == 1


async def update_flashcard_content(
    db: aiosqlite.Connection,
    card_id: str,
    updates: FlashcardUpdate,
) -> Flashcard | None:
    fields = updates.model_dump(exclude_none=True)
    if not fields:
        return await get_flashcard(db, card_id)

    if "choices" in fields:
        fields["choices"] = json.dumps(fields["choices"])

    fields["updated_at"] = _now()
    set_clause = ", ".join(f"{k} = ?" for k in fields)
    values = list(fields.values()) + [card_id]

    cursor = await db.execute(
        f"UPDATE flashcards SET {set_clause} WHERE id = ?",  # noqa: S608
        values,
    )
    await db.commit()
    if (cursor.rowcount or 0) == 0:
        return None
    return await get_flashcard(db, card_id)


async def delete_flashcard(db: aiosqlite.Connection, card_id: str) -> bool:
    cursor = await db.execute("DELETE FROM flashcards WHERE id = ?", (card_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


async def get_deck_stats(
    db: aiosqlite.Connection, deck_id: str, now: datetime
) -> DeckStats:
    """Return total and due counts, per-box breakdown and summed review stats."""
    cursor = await db.execute(
        """SELECT COUNT(*),
                  SUM(CASE WHEN next_review_at <= ? THEN 1 ELSE 0 END),
                  SUM(correct),
                  SUM(incorrect)
           FROM flashcards WHERE deck_id = ?""",
        (format_timestamp(now), deck_id),
    )
    total, due, correct, incorrect = await cursor.fetchone()

    box_cursor = await db.execute(
        "SELECT box, COUNT(*) FROM flashcards WHERE deck_id = ? GROUP BY box",
        (deck_id,),
    )
    counts = {row[0]: row[1] for row in await box_cursor.fetchall()}

    return DeckStats(
        deck_id=deck_id,
        total=total or 0,
        due=due or 0,
        boxes={box: counts.get(box, 0) for box in range(1, 6)},
        correct=correct or 0,
        incorrect=incorrect or 0,
    )
