"""
Store types — snapshots, queries, pages, sentinels, engine exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from artiflare._types import DocumentData, DocumentId


# ═══════════════════════════════════════════════════════════════════════════════
# Sentinels
# ═══════════════════════════════════════════════════════════════════════════════


class _ServerTimestamp:
    """Placeholder resolved by the engine to its own clock at write time."""

    _instance: _ServerTimestamp | None = None

    def __new__(cls) -> _ServerTimestamp:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __deepcopy__(self, memo: dict[int, Any]) -> _ServerTimestamp:
        return self


SERVER_TIMESTAMP = _ServerTimestamp()


# ═══════════════════════════════════════════════════════════════════════════════
# Exceptions — raised by engines, converted to Results by gateways
# ═══════════════════════════════════════════════════════════════════════════════


class StoreException(Exception):
    """Base for engine-level failures."""


class TransactionConflict(StoreException):
    """A document read inside the transaction changed before commit. Transient."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"concurrent modification of {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


class DocumentMissing(StoreException):
    """Update targeted a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Snapshot:
    """
    A document as read. ``data is None`` means it does not exist.

    ``version`` is 0 for a missing document and grows by one on every write;
    transactions compare it at commit time.
    """

    collection: str
    id: DocumentId
    data: DocumentData | None
    version: int = 0

    @property
    def exists(self) -> bool:
        return self.data is not None

    def get(self, path: str, default: Any = None) -> Any:
        if self.data is None:
            return default
        return lookup(self.data, path, default)


def lookup(data: DocumentData, path: str, default: Any = None) -> Any:
    """Resolve a dotted path (``shippingAddress.city``) inside a document."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


# ═══════════════════════════════════════════════════════════════════════════════
# Query
# ═══════════════════════════════════════════════════════════════════════════════

type FilterOp = Literal["==", "!=", "<", "<=", ">", ">=", "in", "array-contains"]

FILTER_OPS: frozenset[str] = frozenset(
    {"==", "!=", "<", "<=", ">", ">=", "in", "array-contains"}
)


@dataclass(frozen=True, slots=True)
class Filter:
    """``(field, op, value)`` — equality, range, membership."""

    field: str
    op: FilterOp
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")


@dataclass(frozen=True, slots=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True, slots=True)
class Query:
    """
    One collection, any number of filters, at most one sort key.

    ``start_after`` is the cursor handed back by the previous page.
    """

    collection: str
    filters: tuple[Filter, ...] = ()
    order_by: OrderBy | None = None
    limit: int | None = None
    start_after: Snapshot | None = None


@dataclass(frozen=True, slots=True)
class Page:
    """
    One page of results.

    ``cursor`` is the last snapshot on this page (``None`` when the page is
    empty); ``total`` counts every match, not only this page.
    """

    items: list[Snapshot] = field(default_factory=list)
    cursor: Snapshot | None = None
    total: int = 0


__all__ = (
    "SERVER_TIMESTAMP",
    "StoreException",
    "TransactionConflict",
    "DocumentMissing",
    "Snapshot",
    "lookup",
    "FilterOp",
    "FILTER_OPS",
    "Filter",
    "OrderBy",
    "Query",
    "Page",
)
