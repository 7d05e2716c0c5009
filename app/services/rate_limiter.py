# =============================================================================
# Rate Limiter — Redis-Based Per-Client Sliding Window
# =============================================================================
#
# Implements a sliding window counter using Redis sorted sets (ZSET).
# Each request adds an entry with its timestamp as the score. On each
# check, entries older than the window are pruned and the remaining
# count is compared against the limit.
#
# Clients are identified by IP address. Defaults: 100 requests per
# 15-minute window (settings.rate_limit_*).
#
# Graceful degradation: if Redis is unavailable the request is allowed
# and a warning is logged. A Redis outage must not take the API down.
# =============================================================================

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass

import redis.asyncio as aioredis

from app.config import settings

logger = logging.getLogger(__name__)

# Lazy Redis connection
_redis_client: aioredis.Redis | None = None


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate-limit check, with values for RateLimit-* headers."""

    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


def _get_rate_limit_redis() -> aioredis.Redis:
    """Lazily create and cache the async Redis client for rate limiting."""
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(
            settings.rate_limit_redis_url,
            decode_responses=True,
            socket_connect_timeout=1,
        )
    return _redis_client


async def check_rate_limit(client_id: str) -> RateLimitDecision:
    """
    Count this request against `client_id`'s window.

    Returns a decision; never raises. When Redis is unreachable the
    decision is "allowed" with the full quota reported as remaining.
    """
    limit = settings.rate_limit_max_requests
    window_seconds = settings.rate_limit_window_seconds
    redis_key = f"ratelimit:client:{client_id}"

    try:
        r = _get_rate_limit_redis()
        now = time.time()
        window_start = now - window_seconds

        pipe = r.pipeline()
        # Remove entries outside the window
        pipe.zremrangebyscore(redis_key, 0, window_start)
        # Count entries in the window
        pipe.zcard(redis_key)
        # Add current request (unique member so same-instant hits all count)
        pipe.zadd(redis_key, {f"{now}:{uuid.uuid4().hex[:8]}": now})
        # Set TTL to auto-cleanup
        pipe.expire(redis_key, window_seconds + 10)
        results = await pipe.execute()
    except Exception as e:
        logger.warning(
            "Rate limiter unavailable (Redis error): %s. "
            "Allowing request through.",
            e,
        )
        return RateLimitDecision(
            allowed=True, limit=limit, remaining=limit, reset_seconds=window_seconds,
        )

    current_count = int(results[1])  # zcard result, before this request
    return RateLimitDecision(
        allowed=current_count < limit,
        limit=limit,
        remaining=max(limit - current_count - 1, 0),
        reset_seconds=window_seconds,
    )
