# =============================================================================
# API Dependencies — FastAPI Dependency Injection
# =============================================================================
#
# 1. get_record_store()    — the configured RecordStore backend (per-request
#                             session from get_async_session)
# 2. get_record_service()  — RecordService bound to that store
# 3. get_valid_record_id() — route-parameter guard for /records/{id}
# 4. get_request_start()   — monotonic timestamp set by RequestTimerMiddleware
#
# Tests swap backends with app.dependency_overrides[get_record_service].
# =============================================================================

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, HTTPException, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.engine import get_async_session
from app.services.query_builder import InvalidIdentifierError, parse_record_id
from app.services.record_store import InMemoryRecordStore, RecordStore, SqlRecordStore
from app.services.records import RecordService

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = "Invalid ID parameter. Must be a valid number."


@lru_cache(maxsize=1)
def get_memory_store() -> InMemoryRecordStore:
    """
    Load the seed file once per process.

    Raises:
        FileNotFoundError: `records_seed_path` does not exist.
    """
    return InMemoryRecordStore.from_json_file(settings.records_seed_path)


async def get_record_store(
    session: AsyncSession = Depends(get_async_session),
) -> AsyncGenerator[RecordStore, None]:
    """
    Yield the RecordStore selected by settings.record_store_type.

    "sql" wraps the per-request AsyncSession. "memory" shares a single
    process-wide store; the session is opened lazily and never connects.
    """
    if settings.record_store_type == "memory":
        yield get_memory_store()
    else:
        yield SqlRecordStore(session)


def get_record_service(
    store: RecordStore = Depends(get_record_store),
) -> RecordService:
    return RecordService(store)


def get_valid_record_id(
    record_id: str = Path(description="Numeric record identifier"),
) -> int:
    """
    Reject non-numeric ids with 400 before any handler or store runs.

    Declared as `str` so FastAPI does not answer malformed ids with its own
    422 validation error.
    """
    try:
        return parse_record_id(record_id)
    except InvalidIdentifierError:
        logger.info("Rejected invalid record id: %r", record_id)
        raise HTTPException(status_code=400, detail=INVALID_ID_MESSAGE) from None


def get_request_start(request: Request) -> float:
    """Monotonic time the request arrived (falls back to now)."""
    return getattr(request.state, "start_time", None) or time.monotonic()
