from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.dashboard import build_default_service
from services.errors import RetrievalError, SourceFormatError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    try:
        await service.load()
    except (RetrievalError, SourceFormatError) as exc:
        logger.error(
            "Initial dashboard load failed: %s",
            exc,
            extra={"source": service.source},
        )
    try:
        yield
    finally:
        build_default_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="PM2.5 Dashboard",
        description="Daily PM2.5 readings aggregated into overall and monthly statistics.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
