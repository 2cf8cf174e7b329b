"""
Redis connection holding the token revocation list.

Callers look the client up as ``redis_client.redis_client`` at call time so
it can be swapped (tests, reconnects).
"""

import logging

import redis.asyncio as redis
from ledger_backend.app.core.config import settings

logger = logging.getLogger("shop_ledger.redis")

# Lazy: no connection is opened until the first command
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    """True if Redis answers, False (and a warning) otherwise."""
    try:
        return bool(await redis_client.ping())
    except (redis.RedisError, OSError) as exc:
        logger.warning("Redis unreachable: %s", exc)
        return False


async def close_redis() -> None:
    await redis_client.aclose()
