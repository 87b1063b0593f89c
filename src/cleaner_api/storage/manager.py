"""Process-wide document store selection."""

import logging
from typing import Optional

from redis.asyncio import Redis

from cleaner_api.config import StoreBackend, get_settings
from cleaner_api.storage.document_store import DocumentStore
from cleaner_api.storage.memory import InMemoryDocumentStore
from cleaner_api.storage.redis_store import RedisDocumentStore

logger = logging.getLogger(__name__)


class StoreManager:
    """Holds the document store the services share."""

    _instance: Optional["StoreManager"] = None

    def __init__(self, store: DocumentStore | None = None):
        self.store: DocumentStore = store or InMemoryDocumentStore()

    @classmethod
    def get_instance(cls) -> "StoreManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def configure(cls, redis: Redis | None) -> DocumentStore:
        """
        Pick the backend from settings.

        Falls back to the in-memory store when Redis is requested but not
        connected.
        """
        settings = get_settings()
        store: DocumentStore
        if settings.store_backend == StoreBackend.REDIS and redis is not None:
            store = RedisDocumentStore(redis, namespace=settings.redis_namespace)
            logger.info("Using Redis document store (namespace %s)", settings.redis_namespace)
        else:
            if settings.store_backend == StoreBackend.REDIS:
                logger.warning("Redis store requested but Redis is unavailable, using memory")
            store = InMemoryDocumentStore()
            logger.info("Using in-memory document store")

        cls._instance = cls(store)
        return store

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None


def get_document_store() -> DocumentStore:
    """Dependency to get the shared document store."""
    return StoreManager.get_instance().store
