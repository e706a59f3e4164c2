"""
Store — document storage engines with optimistic transactions.

    from artiflare import store as St

    store = St.MemoryDocumentStore()
    async with store.transaction() as tx:
        snap = await tx.get("products", "p1")
        tx.update("products", "p1", {"inventory": snap.data["inventory"] - 1})

Engines raise ``TransactionConflict`` / ``DocumentMissing``; gateways turn
them into typed results.
"""

from artiflare.store._types import (
    SERVER_TIMESTAMP,
    StoreException,
    TransactionConflict,
    DocumentMissing,
    Snapshot,
    lookup,
    FilterOp,
    Filter,
    OrderBy,
    Query,
    Page,
)
from artiflare.store._clean import (
    UNDEFINED,
    remove_undefined,
    to_datetime,
    from_datetime,
    normalize_timestamps,
    resolve_server_timestamps,
    utcnow,
)
from artiflare.store._protocol import DocumentStore, Transaction
from artiflare.store._memory import MemoryDocumentStore
from artiflare.store._sqlalchemy import SQLAlchemyDocumentStore, DocumentRow

__all__ = (
    # Types
    "SERVER_TIMESTAMP",
    "Snapshot",
    "lookup",
    "FilterOp",
    "Filter",
    "OrderBy",
    "Query",
    "Page",
    # Exceptions
    "StoreException",
    "TransactionConflict",
    "DocumentMissing",
    # Hygiene
    "UNDEFINED",
    "remove_undefined",
    "to_datetime",
    "from_datetime",
    "normalize_timestamps",
    "resolve_server_timestamps",
    "utcnow",
    # Engines
    "DocumentStore",
    "Transaction",
    "MemoryDocumentStore",
    "SQLAlchemyDocumentStore",
    "DocumentRow",
)
