"""
Buffered transaction — shared read-set / write-set bookkeeping for the engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from artiflare._types import DocumentData, DocumentId
from artiflare.store._types import Snapshot

type WriteKind = Literal["set", "update", "delete"]


@dataclass(frozen=True, slots=True)
class WriteOp:
    kind: WriteKind
    collection: str
    id: DocumentId
    data: DocumentData | None = None


class BufferedTransaction:
    """
    Records the version of every document read and queues every write.

    Engines subclass this and implement ``_read``; their commit walks
    ``reads`` (to detect conflicts) and ``writes`` (to apply), in order.
    A document is read at most once per transaction; later reads return the
    first snapshot.
    """

    def __init__(self) -> None:
        self.reads: dict[tuple[str, DocumentId], Snapshot] = {}
        self.writes: list[WriteOp] = []

    async def _read(self, collection: str, doc_id: DocumentId) -> Snapshot:
        raise NotImplementedError

    async def get(self, collection: str, doc_id: DocumentId) -> Snapshot:
        key = (collection, doc_id)
        if key not in self.reads:
            self.reads[key] = await self._read(collection, doc_id)
        return self.reads[key]

    def set(self, collection: str, doc_id: DocumentId, data: DocumentData) -> None:
        self.writes.append(WriteOp("set", collection, doc_id, dict(data)))

    def update(self, collection: str, doc_id: DocumentId, patch: DocumentData) -> None:
        self.writes.append(WriteOp("update", collection, doc_id, dict(patch)))

    def delete(self, collection: str, doc_id: DocumentId) -> None:
        self.writes.append(WriteOp("delete", collection, doc_id))


__all__ = ("WriteOp", "WriteKind", "BufferedTransaction")
