"""Redis connection lifecycle for the document store."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from cleaner_api.config import Settings, get_settings

logger = logging.getLogger(__name__)


class RedisManager:
    """Owns the connection pool behind the Redis document store."""

    _instance: Optional["RedisManager"] = None

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._pool: redis.ConnectionPool | None = None
        self._redis: Redis | None = None

    @classmethod
    def get_instance(cls) -> "RedisManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def client(self) -> Redis | None:
        """Connected client, or None before connect or after a failed one."""
        return self._redis

    async def connect(self) -> Redis:
        """
        Open the pool and verify it with a PING.

        Raises:
            redis.RedisError: If the server cannot be reached
        """
        if self._redis is not None:
            return self._redis

        self._pool = redis.ConnectionPool.from_url(
            self._settings.redis_url,
            max_connections=self._settings.redis_max_connections,
            decode_responses=True,
        )
        client = Redis(connection_pool=self._pool)
        try:
            await client.ping()  # type: ignore[misc]
        except redis.RedisError:
            await self._pool.disconnect()
            self._pool = None
            raise

        self._redis = client
        logger.info("Connected to Redis at %s", self._settings.redis_url)
        return client

    async def disconnect(self) -> None:
        """Close the client and its pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    @classmethod
    async def reset(cls) -> None:
        """Disconnect and drop the singleton."""
        if cls._instance is not None:
            await cls._instance.disconnect()
        cls._instance = None


async def init_redis() -> Redis | None:
    """Connect at startup; None means the store should fall back to memory."""
    try:
        return await RedisManager.get_instance().connect()
    except (redis.RedisError, ValueError) as e:
        logger.warning("Redis not available, falling back to in-memory store: %s", e)
        return None


async def close_redis() -> None:
    """Close the connection at shutdown."""
    await RedisManager.reset()
