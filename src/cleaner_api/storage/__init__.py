"""Document storage backends."""

from cleaner_api.storage.document_store import Document, DocumentStore, Precondition, Write
from cleaner_api.storage.memory import InMemoryDocumentStore
from cleaner_api.storage.transaction import Transaction

__all__ = [
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "Precondition",
    "Transaction",
    "Write",
]
