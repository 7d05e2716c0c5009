# =============================================================================
# Application Factory
# =============================================================================
#
# Builds the FastAPI app: logging, middleware stack, routers, and exception
# handlers. Run with:
#   uvicorn app.main:app --reload
#
# Middleware added last runs first (outermost), so the stack below executes
# in this order on the way in:
#   RequestTimer → CORS → SecurityHeaders → GZip → RateLimit → routes
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app.api import health, records
from app.api.deps import get_memory_store
from app.api.errors import register_exception_handlers
from app.api.middleware import (
    RateLimitMiddleware,
    RequestTimerMiddleware,
    SecurityHeadersMiddleware,
)
from app.config import settings
from app.db.engine import async_engine
from app.log import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "%s v%s starting (store=%s)",
        settings.app_name, settings.app_version, settings.record_store_type,
    )
    if settings.record_store_type == "memory":
        try:
            store = get_memory_store()
        except FileNotFoundError:
            logger.error(
                "Seed file %s not found; create it with "
                "`python -m scripts.seed_records --json %s`",
                settings.records_seed_path, settings.records_seed_path,
            )
            raise
        logger.info("Loaded %d records from %s", len(store), settings.records_seed_path)
    yield
    await async_engine.dispose()
    logger.info("%s stopped", settings.app_name)


def create_app() -> FastAPI:
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimerMiddleware)

    app.include_router(health.router)
    app.include_router(records.router)

    register_exception_handlers(app)
    return app


app = create_app()
