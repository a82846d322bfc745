"""Shared test fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone

import aiosqlite
import pytest
from fastapi.testclient import TestClient

from notemate import app
from notemate.config import settings
from notemate.db.sqlite import init_sqlite
from notemate.routers.deps import get_clock

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file under tmp_path."""
    monkeypatch.setattr(settings, "data_dir", tmp_path)
    return tmp_path


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def client(data_dir, clock):
    app.dependency_overrides[get_clock] = lambda: clock.now
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


async def open_db(data_dir) -> aiosqlite.Connection:
    db = await aiosqlite.connect(data_dir / settings.sqlite_filename)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys=ON")
    return db


@pytest.fixture
def run_db(data_dir):
    """Run `fn(db)` in a fresh event loop against an initialized database."""

    def run(fn):
        async def main():
            await init_sqlite(data_dir)
            db = await open_db(data_dir)
            try:
                return await fn(db)
            finally:
                await db.close()

        return asyncio.run(main())

    return run
