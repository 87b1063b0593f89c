"""In-memory document store implementation."""

import asyncio
import copy
import uuid
from collections.abc import Sequence
from typing import Any

from cleaner_api.errors.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    DuplicateKeyError,
)
from cleaner_api.storage.document_store import (
    MISSING_VERSION,
    Document,
    DocumentStore,
    Precondition,
    Write,
    matches,
    merge,
)


class InMemoryDocumentStore(DocumentStore):
    """
    Document store backed by dictionaries.

    Suitable for development and tests. A single lock makes every mutation,
    including multi-document commits, atomic with respect to other tasks.
    """

    def __init__(self) -> None:
        # collection -> key -> (version, data)
        self._collections: dict[str, dict[str, tuple[int, dict[str, Any]]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, tuple[int, dict[str, Any]]]:
        return self._collections.setdefault(name, {})

    def _current_version(self, collection: str, key: str) -> int:
        entry = self._collection(collection).get(key)
        return entry[0] if entry else MISSING_VERSION

    def _put(self, collection: str, key: str, data: dict[str, Any]) -> Document:
        version = self._current_version(collection, key) + 1
        self._collection(collection)[key] = (version, copy.deepcopy(data))
        return Document(key=key, data=copy.deepcopy(data), version=version)

    async def _round_trip(self) -> None:
        # Let other tasks run, as a network call would
        await asyncio.sleep(0)

    async def get(self, collection: str, key: str) -> Document | None:
        """Get a document by key."""
        await self._round_trip()
        entry = self._collection(collection).get(key)
        if entry is None:
            return None
        version, data = entry
        return Document(key=key, data=copy.deepcopy(data), version=version)

    async def set(self, collection: str, key: str, value: dict[str, Any]) -> Document:
        """Create or replace a document."""
        await self._round_trip()
        async with self._lock:
            return self._put(collection, key, value)

    async def create(self, collection: str, key: str, value: dict[str, Any]) -> Document:
        """Create a document if the key is free."""
        await self._round_trip()
        async with self._lock:
            if key in self._collection(collection):
                raise DuplicateKeyError(collection, key)
            return self._put(collection, key, value)

    async def update(
        self,
        collection: str,
        key: str,
        partial: dict[str, Any],
        precondition: Precondition | None = None,
    ) -> Document:
        """Merge fields into an existing document."""
        await self._round_trip()
        async with self._lock:
            entry = self._collection(collection).get(key)
            if entry is None:
                raise DocumentNotFoundError(collection, key)

            version, data = entry
            if precondition is not None and precondition.version != version:
                raise ConflictError(
                    details={
                        "collection": collection,
                        "key": key,
                        "expected_version": precondition.version,
                        "actual_version": version,
                    }
                )

            return self._put(collection, key, merge(data, partial))

    async def add(self, collection: str, value: dict[str, Any]) -> str:
        """Create a document under a generated key."""
        key = uuid.uuid4().hex
        await self.create(collection, key, value)
        return key

    async def query(self, collection: str, filters: dict[str, Any]) -> list[Document]:
        """Find all documents matching the filters."""
        await self._round_trip()
        return [
            Document(key=key, data=copy.deepcopy(data), version=version)
            for key, (version, data) in self._collection(collection).items()
            if matches(data, filters)
        ]

    async def commit(self, writes: Sequence[Write]) -> None:
        """Apply writes atomically if every precondition holds."""
        await self._round_trip()
        async with self._lock:
            for write in writes:
                if write.expected_version is None:
                    continue
                actual = self._current_version(write.collection, write.key)
                if actual != write.expected_version:
                    raise ConflictError(
                        details={
                            "collection": write.collection,
                            "key": write.key,
                            "expected_version": write.expected_version,
                            "actual_version": actual,
                        }
                    )

            for write in writes:
                self._put(write.collection, write.key, write.data)

    async def health_check(self) -> dict[str, Any]:
        """In-memory store is always up."""
        return {"status": "up", "latency_ms": 0, "type": "in-memory"}

    def count(self, collection: str) -> int:
        """Count documents in a collection."""
        return len(self._collection(collection))

    def clear(self) -> None:
        """Clear all collections (for testing)."""
        self._collections.clear()
