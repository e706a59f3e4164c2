"""
Collection gateway — typed get / list / create / update / delete over one collection.

    products = ProductGateway(store)

    got = await products.get("p1")
    if got.entity is None:
        ...                                   # got.error is NotFound

    match await products.update("p1", {"price": 12.5}):
        case Ok(product): ...
        case Error(NotFound()): ...
        case Error(ValidationError(issues=issues)): ...

Every write strips ``UNDEFINED`` values and stamps ``updatedAt`` with the
server clock; ``create`` also stamps ``createdAt``. Every read normalizes
timestamps to aware UTC datetimes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from kungfu import Error, Ok, Result

from artiflare._types import DocumentData, DocumentId
from artiflare.errors import NotFound, TransactionAborted, ValidationError
from artiflare.schemas import Entity, validate, validate_partial
from artiflare.store import (
    SERVER_TIMESTAMP,
    DocumentMissing,
    DocumentStore,
    Filter,
    OrderBy,
    Query,
    Snapshot,
    TransactionConflict,
    normalize_timestamps,
    remove_undefined,
)

logger = logging.getLogger(__name__)

type FilterSpec = Filter | tuple[str, str, Any]

DEFAULT_PAGE_SIZE = 20


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class GetResult[T]:
    """``entity`` or ``error``, never both. A missing document is not an exception."""

    entity: T | None
    error: NotFound | None = None

    @property
    def found(self) -> bool:
        return self.entity is not None


@dataclass(frozen=True, slots=True)
class ListPage[T]:
    """
    One page of entities.

    Pass ``cursor`` back as ``list(..., cursor=page.cursor)`` for the next page.
    ``total`` counts every match of the filters.
    """

    items: list[T] = field(default_factory=list)
    cursor: Snapshot | None = None
    total: int = 0


def as_filter(spec: FilterSpec) -> Filter:
    if isinstance(spec, Filter):
        return spec
    name, op, value = spec
    return Filter(name, op, value)  # type: ignore[arg-type]


# ═══════════════════════════════════════════════════════════════════════════════
# Collection
# ═══════════════════════════════════════════════════════════════════════════════


class Collection[M: Entity]:
    """
    Base gateway. Subclasses set ``name`` and ``schema``.

    ``id_field`` names the model attribute that mirrors the document id
    (``id`` for most entities, ``uid`` for users).
    """

    name: ClassVar[str]
    schema: ClassVar[type[Entity]]
    id_field: ClassVar[str] = "id"

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # ───────────────────────────────────────────────────────────────────────────
    # Mapping
    # ───────────────────────────────────────────────────────────────────────────

    def to_entity(self, snapshot: Snapshot) -> M:
        """Build the model from a stored document, timestamps normalized."""
        data = normalize_timestamps(dict(snapshot.data or {}))
        data[self.id_field] = snapshot.id
        return self.schema.model_validate(data)  # type: ignore[return-value]

    def _id_of(self, data: Mapping[str, Any]) -> DocumentId | None:
        value = data.get(self.id_field)
        return str(value) if value else None

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def get(self, doc_id: DocumentId) -> GetResult[M]:
        snapshot = await self.store.get(self.name, doc_id)
        if not snapshot.exists:
            return GetResult(None, NotFound(self.name, doc_id))
        return GetResult(self.to_entity(snapshot))

    async def list(
        self,
        filters: Iterable[FilterSpec] = (),
        order_by: str | OrderBy | None = None,
        page_size: int | None = DEFAULT_PAGE_SIZE,
        cursor: Snapshot | None = None,
    ) -> ListPage[M]:
        if isinstance(order_by, str):
            order_by = OrderBy(order_by)
        page = await self.store.query(
            Query(
                collection=self.name,
                filters=tuple(as_filter(f) for f in filters),
                order_by=order_by,
                limit=page_size,
                start_after=cursor,
            )
        )
        return ListPage(
            items=[self.to_entity(s) for s in page.items],
            cursor=page.cursor,
            total=page.total,
        )

    async def find_one(self, field_name: str, value: Any) -> M | None:
        page = await self.list([(field_name, "==", value)], page_size=1)
        return page.items[0] if page.items else None

    # ───────────────────────────────────────────────────────────────────────────
    # Writes
    # ───────────────────────────────────────────────────────────────────────────

    def prepare(self, data: Mapping[str, Any] | M) -> Result[M, ValidationError]:
        """Clean and validate a full entity (no store access)."""
        if isinstance(data, Entity):
            data = data.model_dump(by_alias=True)
        return validate(self.schema, remove_undefined(data))  # type: ignore[return-value]

    def creation_document(self, entity: M) -> DocumentData:
        document = entity.to_document()
        document["createdAt"] = SERVER_TIMESTAMP
        document["updatedAt"] = SERVER_TIMESTAMP
        return document

    async def create(
        self,
        data: Mapping[str, Any] | M,
        doc_id: DocumentId | None = None,
    ) -> Result[M, ValidationError | TransactionAborted]:
        """
        Validate and persist a new document; return it as stored.

        The id comes from ``doc_id``, then from the payload's id field, then
        from the store.
        """
        match self.prepare(data):
            case Error(err):
                return Error(err)
            case Ok(entity):
                pass

        doc_id = doc_id or self._id_of(entity.model_dump()) or self.store.new_id()
        try:
            await self.store.set(self.name, doc_id, self.creation_document(entity))
        except TransactionConflict as exc:
            return Error(TransactionAborted(str(exc)))

        logger.debug("Created %s/%s", self.name, doc_id)
        return Ok(self.to_entity(await self.store.get(self.name, doc_id)))

    async def update(
        self,
        doc_id: DocumentId,
        patch: Mapping[str, Any],
    ) -> Result[M, ValidationError | NotFound | TransactionAborted]:
        """Merge ``patch`` into an existing document; return the updated entity."""
        match self.update_document(patch):
            case Error(err):
                return Error(err)
            case Ok(document):
                pass

        try:
            await self.store.update(self.name, doc_id, document)
        except DocumentMissing:
            return Error(NotFound(self.name, doc_id))
        except TransactionConflict as exc:
            return Error(TransactionAborted(str(exc)))

        return Ok(self.to_entity(await self.store.get(self.name, doc_id)))

    def update_document(
        self, patch: Mapping[str, Any]
    ) -> Result[DocumentData, ValidationError]:
        """Clean + validate a partial payload and stamp ``updatedAt``."""
        cleaned = remove_undefined(dict(patch))
        for key in (self.id_field, "createdAt", "created_at"):
            cleaned.pop(key, None)
        stamps = {k: v for k, v in cleaned.items() if v is SERVER_TIMESTAMP}
        values = {k: v for k, v in cleaned.items() if v is not SERVER_TIMESTAMP}
        match validate_partial(self.schema, values):
            case Error(err):
                return Error(err)
            case Ok(document):
                document.update(stamps)
                document["updatedAt"] = SERVER_TIMESTAMP
                return Ok(document)

    async def delete(self, doc_id: DocumentId) -> Result[None, NotFound]:
        if not await self.store.delete(self.name, doc_id):
            return Error(NotFound(self.name, doc_id))
        logger.debug("Deleted %s/%s", self.name, doc_id)
        return Ok(None)


__all__ = (
    "GetResult",
    "ListPage",
    "FilterSpec",
    "as_filter",
    "Collection",
    "DEFAULT_PAGE_SIZE",
)
