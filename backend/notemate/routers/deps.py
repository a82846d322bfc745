from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import HTTPException

from notemate.services.errors import ReviewEngineError
from notemate.services.leitner import utcnow
from notemate.services.review import storage_errors


def get_clock() -> datetime:
    """Current time for a request. Tests override this dependency to pin "now"."""
    return utcnow()


def http_error(exc: ReviewEngineError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": exc.kind, "message": str(exc)},
    )


@asynccontextmanager
async def engine_errors(action: str) -> AsyncIterator[None]:
    """Run store calls so failures come back as structured HTTP errors."""
    try:
        async with storage_errors(action):
            yield
    except ReviewEngineError as e:
        raise http_error(e) from e
