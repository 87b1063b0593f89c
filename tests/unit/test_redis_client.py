"""Tests for Redis connection lifecycle."""

from unittest.mock import AsyncMock

import pytest
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from cleaner_api.storage.redis_client import RedisManager, close_redis, init_redis


@pytest.fixture
def redis_manager():
    """Fresh RedisManager singleton."""
    RedisManager._instance = None
    yield
    RedisManager._instance = None


class TestRedisLifecycle:
    """Tests for init_redis / close_redis."""

    @pytest.mark.asyncio
    async def test_unreachable_server_falls_back(self, redis_manager, monkeypatch):
        """Test that a failed PING yields None instead of raising."""
        monkeypatch.setattr(Redis, "ping", AsyncMock(side_effect=RedisConnectionError("refused")))

        assert await init_redis() is None
        assert RedisManager.get_instance().client is None

    @pytest.mark.asyncio
    async def test_connect_and_close(self, redis_manager, monkeypatch):
        monkeypatch.setattr(Redis, "ping", AsyncMock(return_value=True))

        client = await init_redis()

        assert isinstance(client, Redis)
        assert RedisManager.get_instance().client is client
        assert await init_redis() is client

        await close_redis()
        assert RedisManager._instance is None
