from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notemate.config import settings
from notemate.db import init_all_databases


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="NoteMate API", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from notemate.routers import cards, decks, health

    application.include_router(health.router)
    application.include_router(decks.router, prefix="/decks", tags=["decks"])
    application.include_router(cards.router, prefix="/cards", tags=["cards"])

    return application


app = create_app()
