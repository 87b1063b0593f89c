"""Redis-backed document store."""

import json
import logging
import time
import uuid
from collections.abc import Sequence
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import NoScriptError, RedisError

from cleaner_api.errors.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    DuplicateKeyError,
    TransientError,
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
from cleaner_api.storage.lua_scripts import COMMIT_SCRIPT, lua_scripts

logger = logging.getLogger(__name__)


class RedisDocumentStore(DocumentStore):
    """
    Document store on top of Redis hashes.

    Each document is a hash ``{namespace}:{collection}:{key}`` with a JSON
    ``data`` field and an integer ``version`` field. A set per collection
    indexes the keys for queries. All writes go through the commit Lua
    script, which checks versions and applies writes in one server-side step.
    """

    def __init__(
        self,
        redis: Redis,
        namespace: str = "pc_cleaner",
        update_attempts: int = 5,
    ):
        self._redis = redis
        self._namespace = namespace
        self._update_attempts = update_attempts

    def _doc_key(self, collection: str, key: str) -> str:
        return f"{self._namespace}:{collection}:{key}"

    def _index_key(self, collection: str) -> str:
        return f"{self._namespace}:{collection}:__keys__"

    async def _run_commit(self, writes: Sequence[Write]) -> list[int]:
        """Run the commit script and return its raw result."""
        keys = [self._doc_key(w.collection, w.key) for w in writes]
        keys += [self._index_key(w.collection) for w in writes]

        args: list[Any] = []
        for write in writes:
            expected = -1 if write.expected_version is None else write.expected_version
            args += [expected, json.dumps(write.data), write.key]

        try:
            if lua_scripts.commit_sha:
                try:
                    result: Any = await self._redis.evalsha(  # type: ignore[misc]
                        lua_scripts.commit_sha,
                        len(keys),
                        *keys,
                        *args,
                    )
                except NoScriptError:
                    logger.warning("Commit script missing from Redis, sending inline")
                    result = await self._redis.eval(  # type: ignore[misc]
                        COMMIT_SCRIPT, len(keys), *keys, *args
                    )
            else:
                result = await self._redis.eval(  # type: ignore[misc]
                    COMMIT_SCRIPT, len(keys), *keys, *args
                )
        except RedisError as e:
            raise TransientError(details={"operation": "commit", "error": str(e)}) from e

        return [int(value) for value in result]

    async def get(self, collection: str, key: str) -> Document | None:
        """Get a document by key."""
        try:
            raw: dict[str, str] = await self._redis.hgetall(  # type: ignore[misc]
                self._doc_key(collection, key)
            )
        except RedisError as e:
            raise TransientError(details={"operation": "get", "error": str(e)}) from e

        if not raw:
            return None
        return Document(key=key, data=json.loads(raw["data"]), version=int(raw["version"]))

    async def set(self, collection: str, key: str, value: dict[str, Any]) -> Document:
        """Create or replace a document."""
        result = await self._run_commit([Write(collection, key, value)])
        return Document(key=key, data=value, version=result[1])

    async def create(self, collection: str, key: str, value: dict[str, Any]) -> Document:
        """Create a document if the key is free."""
        result = await self._run_commit(
            [Write(collection, key, value, expected_version=MISSING_VERSION)]
        )
        if not result[0]:
            raise DuplicateKeyError(collection, key)
        return Document(key=key, data=value, version=result[1])

    async def update(
        self,
        collection: str,
        key: str,
        partial: dict[str, Any],
        precondition: Precondition | None = None,
    ) -> Document:
        """
        Merge fields into an existing document.

        Without a precondition the merge is retried against fresh reads until
        it lands, so concurrent updates to other fields are never lost.
        """
        for _ in range(self._update_attempts):
            current = await self.get(collection, key)
            if current is None:
                raise DocumentNotFoundError(collection, key)

            if precondition is not None and precondition.version != current.version:
                raise ConflictError(
                    details={
                        "collection": collection,
                        "key": key,
                        "expected_version": precondition.version,
                        "actual_version": current.version,
                    }
                )

            data = merge(current.data, partial)
            result = await self._run_commit(
                [Write(collection, key, data, expected_version=current.version)]
            )
            if result[0]:
                return Document(key=key, data=data, version=result[1])
            if precondition is not None:
                break

        raise ConflictError(details={"collection": collection, "key": key})

    async def add(self, collection: str, value: dict[str, Any]) -> str:
        """Create a document under a generated key."""
        key = uuid.uuid4().hex
        await self.create(collection, key, value)
        return key

    async def query(self, collection: str, filters: dict[str, Any]) -> list[Document]:
        """Find all documents matching the filters."""
        try:
            keys: set[str] = await self._redis.smembers(  # type: ignore[misc]
                self._index_key(collection)
            )
        except RedisError as e:
            raise TransientError(details={"operation": "query", "error": str(e)}) from e

        documents = []
        for key in sorted(keys):
            document = await self.get(collection, key)
            if document is not None and matches(document.data, filters):
                documents.append(document)
        return documents

    async def commit(self, writes: Sequence[Write]) -> None:
        """Apply writes atomically if every precondition holds."""
        if not writes:
            return

        result = await self._run_commit(writes)
        if not result[0]:
            failed = writes[result[1] - 1]
            raise ConflictError(
                details={
                    "collection": failed.collection,
                    "key": failed.key,
                    "expected_version": failed.expected_version,
                }
            )

    async def health_check(self) -> dict[str, Any]:
        """Check Redis health."""
        try:
            start = time.perf_counter()
            await self._redis.ping()  # type: ignore[misc]
            latency = (time.perf_counter() - start) * 1000
            return {"status": "up", "latency_ms": round(latency, 2), "type": "redis"}
        except RedisError as e:
            return {"status": "error", "error": str(e), "latency_ms": None, "type": "redis"}
