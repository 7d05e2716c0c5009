# =============================================================================
# HTTP Middleware — Request Timing, Security Headers, Rate Limiting
# =============================================================================
#
# Starlette middleware (not FastAPI dependencies) because each of these wraps
# the ENTIRE request lifecycle and applies to every route without opt-in.
#
# Registration order in create_app() (outermost first):
#   RequestTimerMiddleware   — stamps request.state.start_time, access log
#   SecurityHeadersMiddleware
#   RateLimitMiddleware      — may short-circuit with 429
# =============================================================================

from __future__ import annotations

import logging
import time

from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.services.rate_limiter import check_rate_limit

logger = logging.getLogger("app.access")

# Paths exempt from rate limiting (probes and docs)
_RATE_LIMIT_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


class RequestTimerMiddleware(BaseHTTPMiddleware):
    """
    Record when each request arrived and log one access line per request.

    Route handlers read request.state.start_time to report execution time
    measured from arrival rather than from handler entry.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.monotonic()
        request.state.start_time = start_time

        response = await call_next(request)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        client_ip = request.client.host if request.client else "-"
        logger.info(
            '%s "%s %s" %d %dms',
            client_ip,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add conservative security headers to every response."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        for name, value in _SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client-IP request quota backed by Redis.

    Allowed responses carry RateLimit-Limit / RateLimit-Remaining /
    RateLimit-Reset headers; rejected requests get a 429 JSON body.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if not settings.rate_limit_enabled:
            return await call_next(request)

        if request.url.path in _RATE_LIMIT_SKIP_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        decision = await check_rate_limit(client_ip)
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_seconds),
        }

        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s", client_ip)
            return JSONResponse(
                status_code=429,
                content={"status": 429, "message": RATE_LIMIT_MESSAGE},
                headers={**headers, "Retry-After": str(decision.reset_seconds)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
