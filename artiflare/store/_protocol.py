"""
Store protocol — the storage contract the gateways and the orchestrator rely on.

A store holds flat collections of JSON-like documents keyed by id.
Transactions are optimistic: reads record the version they saw, writes are
buffered, and commit fails with ``TransactionConflict`` if any document read
inside the transaction changed in the meantime.

    async with store.transaction() as tx:
        snap = await tx.get("products", "p1")
        tx.update("products", "p1", {"inventory": snap.data["inventory"] - 1})
    # committed here; TransactionConflict raised on contention
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from artiflare._types import DocumentData, DocumentId
from artiflare.store._types import Page, Query, Snapshot


class Transaction(Protocol):
    """Buffered, all-or-nothing write unit. Reads are awaited, writes are queued."""

    async def get(self, collection: str, doc_id: DocumentId) -> Snapshot: ...

    def set(self, collection: str, doc_id: DocumentId, data: DocumentData) -> None:
        """Create or overwrite."""
        ...

    def update(self, collection: str, doc_id: DocumentId, patch: DocumentData) -> None:
        """Merge top-level keys; commit fails with ``DocumentMissing`` if absent."""
        ...

    def delete(self, collection: str, doc_id: DocumentId) -> None: ...


class DocumentStore(Protocol):
    """Engine contract. Implementations: memory, SQLAlchemy."""

    def new_id(self) -> DocumentId: ...

    async def get(self, collection: str, doc_id: DocumentId) -> Snapshot: ...

    async def query(self, query: Query) -> Page: ...

    async def set(self, collection: str, doc_id: DocumentId, data: DocumentData) -> None: ...

    async def update(
        self, collection: str, doc_id: DocumentId, patch: DocumentData
    ) -> None:
        """Merge top-level keys. Raises ``DocumentMissing``."""
        ...

    async def delete(self, collection: str, doc_id: DocumentId) -> bool:
        """Returns ``True`` if the document existed."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[Transaction]: ...


__all__ = ("Transaction", "DocumentStore")
