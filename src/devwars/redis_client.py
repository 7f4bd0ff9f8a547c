"""Optional Redis client backing the request rate limiter.

Redis is off when ``DEVWARS_REDIS_URL`` is empty. Callers ask for the client
with ``current_redis()`` and treat None as "no Redis", so the API keeps
serving without it.
"""

import redis.asyncio as redis
import structlog

from devwars.config import Settings

logger = structlog.get_logger()

_client: redis.Redis | None = None


async def connect_redis(settings: Settings) -> redis.Redis | None:
    """Create the shared client from settings. Returns None when Redis is off."""
    global _client  # noqa: PLW0603
    if not settings.redis_url:
        logger.info("redis_disabled")
        return None
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        decode_responses=True,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
    )
    return _client


async def disconnect_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def current_redis() -> redis.Redis | None:
    return _client
