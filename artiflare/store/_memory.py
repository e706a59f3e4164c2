"""
In-memory document store — for tests and examples.

Note: single process only. Documents are deep-copied on the way in and out,
so callers can never mutate stored state by accident.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from artiflare._types import DocumentData, DocumentId
from artiflare.store._clean import resolve_server_timestamps, utcnow
from artiflare.store._query import run_query
from artiflare.store._tx import BufferedTransaction, WriteOp
from artiflare.store._types import (
    DocumentMissing,
    Page,
    Query,
    Snapshot,
    TransactionConflict,
)

logger = logging.getLogger(__name__)


@dataclass
class _Stored:
    data: DocumentData
    version: int


class _MemoryTransaction(BufferedTransaction):
    def __init__(self, store: MemoryDocumentStore) -> None:
        super().__init__()
        self._store = store

    async def _read(self, collection: str, doc_id: DocumentId) -> Snapshot:
        return await self._store.get(collection, doc_id)


class MemoryDocumentStore:
    """
    Dict-backed engine with the same optimistic semantics as the SQL engine.

    Every awaited read yields to the event loop once, so concurrent tasks
    interleave between their read and commit phases the way they would
    against a networked store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[DocumentId, _Stored]] = {}
        self._lock = asyncio.Lock()

    def new_id(self) -> DocumentId:
        return uuid.uuid4().hex

    def _collection(self, name: str) -> dict[DocumentId, _Stored]:
        return self._collections.setdefault(name, {})

    def _snapshot(self, collection: str, doc_id: DocumentId) -> Snapshot:
        stored = self._collection(collection).get(doc_id)
        if stored is None:
            return Snapshot(collection, doc_id, None, 0)
        return Snapshot(collection, doc_id, copy.deepcopy(stored.data), stored.version)

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def get(self, collection: str, doc_id: DocumentId) -> Snapshot:
        await asyncio.sleep(0)
        return self._snapshot(collection, doc_id)

    async def query(self, query: Query) -> Page:
        await asyncio.sleep(0)
        snapshots = [
            self._snapshot(query.collection, doc_id)
            for doc_id in self._collection(query.collection)
        ]
        return run_query(snapshots, query)

    # ───────────────────────────────────────────────────────────────────────────
    # Writes
    # ───────────────────────────────────────────────────────────────────────────

    async def set(self, collection: str, doc_id: DocumentId, data: DocumentData) -> None:
        async with self._lock:
            self._apply(WriteOp("set", collection, doc_id, data))

    async def update(
        self, collection: str, doc_id: DocumentId, patch: DocumentData
    ) -> None:
        async with self._lock:
            self._apply(WriteOp("update", collection, doc_id, patch))

    async def delete(self, collection: str, doc_id: DocumentId) -> bool:
        async with self._lock:
            return self._collection(collection).pop(doc_id, None) is not None

    def _check(self, op: WriteOp) -> None:
        if op.kind == "update" and op.id not in self._collection(op.collection):
            raise DocumentMissing(op.collection, op.id)

    def _apply(self, op: WriteOp) -> None:
        self._check(op)
        docs = self._collection(op.collection)
        if op.kind == "delete":
            docs.pop(op.id, None)
            return

        payload = resolve_server_timestamps(copy.deepcopy(op.data or {}), utcnow())
        current = docs.get(op.id)
        version = current.version + 1 if current else 1
        if op.kind == "update" and current is not None:
            payload = {**current.data, **payload}
        docs[op.id] = _Stored(payload, version)

    # ───────────────────────────────────────────────────────────────────────────
    # Transactions
    # ───────────────────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_MemoryTransaction]:
        tx = _MemoryTransaction(self)
        yield tx
        if not tx.writes:
            return
        async with self._lock:
            for (collection, doc_id), seen in tx.reads.items():
                stored = self._collection(collection).get(doc_id)
                current = stored.version if stored else 0
                if current != seen.version:
                    logger.debug("Conflict on %s/%s", collection, doc_id)
                    raise TransactionConflict(collection, doc_id)
            # Validate every write before applying any.
            present: dict[tuple[str, DocumentId], bool] = {}
            for op in tx.writes:
                key = (op.collection, op.id)
                exists = present.get(key, op.id in self._collection(op.collection))
                if op.kind == "update" and not exists:
                    raise DocumentMissing(op.collection, op.id)
                present[key] = op.kind != "delete"
            for op in tx.writes:
                self._apply(op)

    def dump(self, collection: str) -> dict[DocumentId, DocumentData]:
        """Copy of a whole collection (test helper)."""
        return {
            doc_id: copy.deepcopy(stored.data)
            for doc_id, stored in self._collection(collection).items()
        }


__all__ = ("MemoryDocumentStore",)
