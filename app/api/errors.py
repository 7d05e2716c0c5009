# =============================================================================
# Exception Handlers — Uniform Error Envelope
# =============================================================================
#
# Every error leaves the API as:
#   {"status": "error", "message": "<safe message>", "error": "<detail>"}
# `error` is only present when settings.expose_error_details is on and there
# is an underlying error to report. Stack traces are logged, never returned.
#
#   HTTPException (400 invalid id, unknown route 404, ...) → its status
#   RecordStoreError                                      → 500
#   anything else                                         → 500
# =============================================================================

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.models.responses import ErrorResponse
from app.services.records import RecordStoreError

logger = logging.getLogger(__name__)

RESOURCE_NOT_FOUND_MESSAGE = "Resource not found"
UNHANDLED_ERROR_MESSAGE = "Something went wrong!"


def _error_response(
    status_code: int,
    message: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        message=message,
        error=detail if settings.expose_error_details else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    message = str(exc.detail)
    # Starlette's router raises 404 "Not Found" for unmatched paths.
    if exc.status_code == 404 and message == "Not Found":
        message = RESOURCE_NOT_FOUND_MESSAGE
    return _error_response(
        exc.status_code, message, headers=getattr(exc, "headers", None),
    )


async def record_store_error_handler(
    request: Request, exc: RecordStoreError,
) -> JSONResponse:
    # Already logged with traceback by RecordService.
    return _error_response(500, exc.message, exc.detail)


async def unhandled_exception_handler(
    request: Request, exc: Exception,
) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path,
    )
    return _error_response(500, UNHANDLED_ERROR_MESSAGE, str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RecordStoreError, record_store_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
