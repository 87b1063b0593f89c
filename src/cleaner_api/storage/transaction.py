"""Optimistic transactions over a document store."""

import copy
from typing import Any

from cleaner_api.storage.document_store import (
    MISSING_VERSION,
    DocumentStore,
    Write,
    merge,
)


class Transaction:
    """
    Read-check-write unit with optimistic concurrency.

    Every document read through the transaction has its version recorded.
    Writes are buffered and, on ``commit``, sent to the store as one atomic
    batch conditioned on those versions. If any written document changed
    since it was read the store raises ``ConflictError`` and nothing is
    applied; the caller starts a fresh transaction and tries again.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._read_versions: dict[tuple[str, str], int] = {}
        self._snapshots: dict[tuple[str, str], dict[str, Any]] = {}
        self._writes: dict[tuple[str, str], dict[str, Any]] = {}
        self._committed = False

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        """Read a document and remember its version."""
        ref = (collection, key)
        if ref in self._writes:
            return copy.deepcopy(self._writes[ref])

        document = await self._store.get(collection, key)
        if document is None:
            self._read_versions[ref] = MISSING_VERSION
            return None

        self._read_versions[ref] = document.version
        self._snapshots[ref] = document.data
        return copy.deepcopy(document.data)

    def set(self, collection: str, key: str, value: dict[str, Any]) -> None:
        """Buffer a full-document write."""
        self._writes[(collection, key)] = copy.deepcopy(value)

    def update(self, collection: str, key: str, partial: dict[str, Any]) -> None:
        """Buffer a field-level update of a document read in this transaction."""
        ref = (collection, key)
        if ref in self._writes:
            base = self._writes[ref]
        elif ref in self._snapshots:
            base = self._snapshots[ref]
        else:
            raise KeyError(f"{collection}/{key} must be read before it is updated")
        self._writes[ref] = merge(base, partial)

    @property
    def writes(self) -> list[Write]:
        return [
            Write(
                collection=collection,
                key=key,
                data=data,
                expected_version=self._read_versions.get((collection, key)),
            )
            for (collection, key), data in self._writes.items()
        ]

    async def commit(self) -> None:
        """Send buffered writes as one conditional batch."""
        if self._committed:
            raise RuntimeError("Transaction already committed")
        self._committed = True
        if self._writes:
            await self._store.commit(self.writes)
