"""
SQLAlchemy document store — every collection in one ``documents`` table.

Usage:
    store = SQLAlchemyDocumentStore.from_url("sqlite+aiosqlite:///./artiflare.db")
    await store.create_tables()

    await store.set("products", "p1", {"name": "Vase", "inventory": 3})
    snap = await store.get("products", "p1")

Schema:
    documents(collection, id, data JSON, version, created_at, updated_at)

Optimistic concurrency: each write bumps ``version``; transactional writes
use ``UPDATE ... WHERE version = :seen`` and a zero row count means another
writer got there first. Datetimes inside ``data`` are stored as
``{seconds, nanoseconds}`` mappings; gateways normalize them on read.

Queries compile to SQL over ``json_extract`` (see ``_sql_query``): filters,
sort, cursor and limit run in the database and ``total`` is a ``COUNT``.
Filters with array or object operands narrow the rows in SQL and finish in
Python.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any, cast

from sqlalchemy import JSON, DateTime, Integer, String, delete, func, insert, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from artiflare._types import DocumentData, DocumentId
from artiflare.store._clean import from_datetime, resolve_server_timestamps, utcnow
from artiflare.store._query import run_query
from artiflare.store._sql_query import compile_query
from artiflare.store._tx import BufferedTransaction, WriteOp
from artiflare.store._types import (
    DocumentMissing,
    Page,
    Query,
    Snapshot,
    TransactionConflict,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class DocumentRow(Base):
    """One document of one collection."""

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def encode(value: Any) -> Any:
    """Make a payload JSON-safe; datetimes become ``{seconds, nanoseconds}``."""
    if isinstance(value, datetime):
        return from_datetime(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    return value


def _where(collection: str, doc_id: DocumentId) -> tuple[Any, Any]:
    return (DocumentRow.collection == collection, DocumentRow.id == doc_id)


def _snapshot(row: DocumentRow) -> Snapshot:
    return Snapshot(row.collection, row.id, dict(row.data), row.version)


# ═══════════════════════════════════════════════════════════════════════════════
# Transaction
# ═══════════════════════════════════════════════════════════════════════════════


class _SQLTransaction(BufferedTransaction):
    def __init__(self, store: SQLAlchemyDocumentStore) -> None:
        super().__init__()
        self._store = store

    async def _read(self, collection: str, doc_id: DocumentId) -> Snapshot:
        return await self._store.get(collection, doc_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyDocumentStore:
    """
    Document store over SQLAlchemy async (SQLite via aiosqlite by default).

    Example:
        engine = create_async_engine("sqlite+aiosqlite:///./artiflare.db")
        store = SQLAlchemyDocumentStore(async_sessionmaker(engine), engine)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> SQLAlchemyDocumentStore:
        engine = create_async_engine(url, **engine_kwargs)
        return cls(async_sessionmaker(engine, expire_on_commit=False), engine)

    async def create_tables(self) -> None:
        if self._engine is None:
            raise RuntimeError("create_tables() needs the engine; use from_url()")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    def new_id(self) -> DocumentId:
        return uuid.uuid4().hex

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def get(self, collection: str, doc_id: DocumentId) -> Snapshot:
        async with self._session_factory() as session:
            row = (
                await session.execute(select(DocumentRow).where(*_where(collection, doc_id)))
            ).scalar_one_or_none()
            if row is None:
                return Snapshot(collection, doc_id, None, 0)
            return Snapshot(collection, doc_id, dict(row.data), row.version)

    async def query(self, query: Query) -> Page:
        compiled = compile_query(query, data=DocumentRow.data, doc_id=DocumentRow.id)
        scope = (DocumentRow.collection == query.collection, *compiled.where)
        async with self._session_factory() as session:
            if compiled.residual:
                logger.debug(
                    "Query on %s finishes in Python: %s", query.collection, compiled.residual
                )
                rows = (await session.execute(select(DocumentRow).where(*scope))).scalars()
                return run_query([_snapshot(row) for row in rows], query)

            total = await session.scalar(
                select(func.count()).select_from(DocumentRow).where(*scope)
            )
            stmt = select(DocumentRow).where(*scope).order_by(*compiled.order)
            if compiled.after is not None:
                stmt = stmt.where(compiled.after)
            if query.limit is not None:
                stmt = stmt.limit(query.limit)
            items = [_snapshot(row) for row in (await session.execute(stmt)).scalars()]
        return Page(items=items, cursor=items[-1] if items else None, total=total or 0)

    # ───────────────────────────────────────────────────────────────────────────
    # Writes
    # ───────────────────────────────────────────────────────────────────────────

    async def set(self, collection: str, doc_id: DocumentId, data: DocumentData) -> None:
        await self._write([WriteOp("set", collection, doc_id, data)], {})

    async def update(
        self, collection: str, doc_id: DocumentId, patch: DocumentData
    ) -> None:
        await self._write([WriteOp("update", collection, doc_id, patch)], {})

    async def delete(self, collection: str, doc_id: DocumentId) -> bool:
        async with self._session_factory() as session, session.begin():
            result = cast(
                CursorResult[Any],
                await session.execute(delete(DocumentRow).where(*_where(collection, doc_id))),
            )
            return result.rowcount > 0

    async def _write(
        self,
        ops: list[WriteOp],
        seen: dict[tuple[str, DocumentId], Snapshot],
    ) -> None:
        try:
            await self._commit(ops, seen)
        except OperationalError as exc:
            # SQLite reports lock contention between writers this way.
            if "locked" not in str(exc):
                raise
            first = ops[0]
            raise TransactionConflict(first.collection, first.id) from exc

    async def _commit(
        self,
        ops: list[WriteOp],
        seen: dict[tuple[str, DocumentId], Snapshot],
    ) -> None:
        async with self._session_factory() as session, session.begin():
            expected: dict[tuple[str, DocumentId], int] = {}
            for key, snap in seen.items():
                current = await session.scalar(
                    select(DocumentRow.version).where(*_where(*key))
                )
                if (current or 0) != snap.version:
                    logger.debug("Conflict on %s/%s", *key)
                    raise TransactionConflict(*key)
                expected[key] = snap.version
            for op in ops:
                await self._apply(session, op, expected)

    async def _apply(
        self,
        session: AsyncSession,
        op: WriteOp,
        expected: dict[tuple[str, DocumentId], int],
    ) -> None:
        key = (op.collection, op.id)
        if key in expected:
            version = expected[key]
        else:
            version = await session.scalar(
                select(DocumentRow.version).where(*_where(*key))
            ) or 0

        if op.kind == "delete":
            if version:
                await self._guarded(
                    session,
                    key,
                    delete(DocumentRow).where(*_where(*key), DocumentRow.version == version),
                )
            expected[key] = 0
            return

        now = utcnow()
        payload = encode(resolve_server_timestamps(op.data or {}, now))

        if op.kind == "update":
            if not version:
                raise DocumentMissing(*key)
            current = await session.scalar(select(DocumentRow.data).where(*_where(*key)))
            payload = {**(current or {}), **payload}

        if not version:
            try:
                await session.execute(
                    insert(DocumentRow).values(
                        collection=op.collection,
                        id=op.id,
                        data=payload,
                        version=1,
                        created_at=now,
                        updated_at=now,
                    )
                )
            except IntegrityError as exc:
                raise TransactionConflict(*key) from exc
            expected[key] = 1
            return

        await self._guarded(
            session,
            key,
            update(DocumentRow)
            .where(*_where(*key), DocumentRow.version == version)
            .values(data=payload, version=version + 1, updated_at=now),
        )
        expected[key] = version + 1

    async def _guarded(
        self, session: AsyncSession, key: tuple[str, DocumentId], stmt: Any
    ) -> None:
        result = cast(CursorResult[Any], await session.execute(stmt))
        if result.rowcount == 0:
            raise TransactionConflict(*key)

    # ───────────────────────────────────────────────────────────────────────────
    # Transactions
    # ───────────────────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_SQLTransaction]:
        tx = _SQLTransaction(self)
        yield tx
        if not tx.writes:
            return
        await self._write(tx.writes, tx.reads)


__all__ = ("Base", "DocumentRow", "SQLAlchemyDocumentStore", "encode")
