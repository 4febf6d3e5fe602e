from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.engine import build_default_engine
from services.ingest import build_default_ingestor
from services.scheduler import DailyScheduler


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    engine = build_default_engine()
    window = engine.digest.window
    scheduler = DailyScheduler(engine.tick, offset=window.offset, repeat=window.repeat)
    engine.start()
    scheduler.start()
    try:
        yield
    finally:
        scheduler.stop()
        engine.stop()
        build_default_ingestor.cache_clear()
        build_default_engine.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Weather Watch",
        description="Real-time outdoor weather alerts and a daily temperature digest.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
