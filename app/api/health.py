from __future__ import annotations

import time
from datetime import UTC, datetime

from fastapi import APIRouter

from app.models.responses import HealthResponse

router = APIRouter(tags=["Health"])

_PROCESS_STARTED = time.monotonic()


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        uptime=round(time.monotonic() - _PROCESS_STARTED, 3),
        timestamp=datetime.now(UTC),
    )
