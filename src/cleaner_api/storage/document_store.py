"""Document store interface shared by the in-memory and Redis backends."""

import copy
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

# Version of a document that does not exist yet
MISSING_VERSION = 0


@dataclass(frozen=True)
class Document:
    """A stored record together with its version token."""

    key: str
    data: dict[str, Any]
    version: int


@dataclass(frozen=True)
class Precondition:
    """Require the stored document to be at exactly this version."""

    version: int


@dataclass(frozen=True)
class Write:
    """
    One full-document write inside a commit.

    ``expected_version`` of None writes unconditionally; ``MISSING_VERSION``
    requires the document not to exist.
    """

    collection: str
    key: str
    data: dict[str, Any] = field(default_factory=dict)
    expected_version: int | None = None


def matches(data: dict[str, Any], filters: dict[str, Any]) -> bool:
    """Check equality filters against a document."""
    return all(data.get(name) == value for name, value in filters.items())


def merge(data: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
    """Apply a field-level update to a copy of a document."""
    merged = copy.deepcopy(data)
    merged.update(copy.deepcopy(partial))
    return merged


class DocumentStore(ABC):
    """
    Minimal document store used by the entitlement and redemption services.

    Every method is a network-bound call in production. Implementations raise
    ``TransientError`` for connectivity failures, ``ConflictError`` when a
    version precondition fails, ``DuplicateKeyError`` when ``create`` finds an
    existing key and ``DocumentNotFoundError`` when ``update`` finds none.
    """

    @abstractmethod
    async def get(self, collection: str, key: str) -> Document | None:
        """Fetch a document, or None if it does not exist."""

    @abstractmethod
    async def set(self, collection: str, key: str, value: dict[str, Any]) -> Document:
        """Create or replace a document unconditionally."""

    @abstractmethod
    async def create(self, collection: str, key: str, value: dict[str, Any]) -> Document:
        """Create a document, failing if the key is taken."""

    @abstractmethod
    async def update(
        self,
        collection: str,
        key: str,
        partial: dict[str, Any],
        precondition: Precondition | None = None,
    ) -> Document:
        """Merge fields into an existing document."""

    @abstractmethod
    async def add(self, collection: str, value: dict[str, Any]) -> str:
        """Create a document under a generated key and return the key."""

    @abstractmethod
    async def query(self, collection: str, filters: dict[str, Any]) -> list[Document]:
        """Return every document whose fields equal the given filters."""

    @abstractmethod
    async def commit(self, writes: Sequence[Write]) -> None:
        """
        Apply several writes atomically.

        Either every precondition holds and every write is applied, or
        ``ConflictError`` is raised and nothing changes.
        """

    async def health_check(self) -> dict[str, Any]:
        """Report backend health."""
        return {"status": "up", "latency_ms": 0}
