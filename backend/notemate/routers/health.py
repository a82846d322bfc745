from fastapi import APIRouter

from notemate.services.card_locks import active_lock_count

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    return {
        "ok": True,
        "service": "notemate-api",
        "reviews_in_flight": active_lock_count(),
    }
