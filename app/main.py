from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.dashboard import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # One shared HTTP client per process; closed before the cache forgets it.
    service = build_default_service()
    settings = get_settings()
    logger.info(
        "Dashboard ready against %s",
        settings.api_url,
        extra={"device_id": settings.default_device_id},
    )
    try:
        yield
    finally:
        await service.aclose()
        build_default_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="SmartCitizen Dashboard",
        description="Live and historical weather and air-quality readings for SmartCitizen devices.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app


app = create_app()
