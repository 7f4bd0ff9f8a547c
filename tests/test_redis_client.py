"""Tests for the optional Redis client."""

from devwars.config import Settings
from devwars.redis_client import connect_redis, current_redis, disconnect_redis


async def test_empty_url_disables_redis() -> None:
    assert await connect_redis(Settings(redis_url="")) is None
    assert current_redis() is None


async def test_client_built_from_settings() -> None:
    settings = Settings(redis_url="redis://localhost:6379/3", redis_max_connections=7)
    client = await connect_redis(settings)
    try:
        assert client is current_redis()
        assert client.connection_pool.max_connections == 7
        assert client.connection_pool.connection_kwargs["db"] == 3
    finally:
        await disconnect_redis()
    assert current_redis() is None
