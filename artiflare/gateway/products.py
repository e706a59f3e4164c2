"""
Products — catalog documents owned by one artisan each.

Inventory is never written through ``update``-style blind patches during
order placement; see ``artiflare.inventory`` and ``artiflare.orders``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from kungfu import Error, Ok, Result

from artiflare.errors import NotFound, TransactionAborted, ValidationError
from artiflare.gateway._base import DEFAULT_PAGE_SIZE, Collection, ListPage
from artiflare.schemas import Product
from artiflare.store import DocumentMissing, OrderBy, Snapshot, TransactionConflict

logger = logging.getLogger(__name__)


class ProductGateway(Collection[Product]):
    name = "products"
    schema = Product

    async def by_artisan(
        self,
        artisan_id: str,
        page_size: int | None = DEFAULT_PAGE_SIZE,
        cursor: Snapshot | None = None,
    ) -> ListPage[Product]:
        """Newest first."""
        return await self.list(
            [("artisanId", "==", artisan_id)],
            order_by=OrderBy("createdAt", descending=True),
            page_size=page_size,
            cursor=cursor,
        )

    async def create_many(
        self, products: Sequence[Mapping[str, Any] | Product]
    ) -> Result[list[str], ValidationError | TransactionAborted]:
        """Validate every product, then write them all in one transaction."""
        documents: list[dict[str, Any]] = []
        for product in products:
            match self.prepare(product):
                case Error(err):
                    return Error(err)
                case Ok(entity):
                    documents.append(self.creation_document(entity))

        ids = [self.store.new_id() for _ in documents]
        try:
            async with self.store.transaction() as tx:
                for doc_id, document in zip(ids, documents, strict=True):
                    tx.set(self.name, doc_id, document)
        except TransactionConflict as exc:
            return Error(TransactionAborted(str(exc)))

        logger.info("Created %d products", len(ids))
        return Ok(ids)

    async def update_many(
        self, updates: Mapping[str, Mapping[str, Any]]
    ) -> Result[None, ValidationError | NotFound | TransactionAborted]:
        """Apply several partial updates atomically; any missing id aborts all."""
        documents: dict[str, dict[str, Any]] = {}
        for product_id, patch in updates.items():
            match self.update_document(patch):
                case Error(err):
                    return Error(err)
                case Ok(document):
                    documents[product_id] = document

        try:
            async with self.store.transaction() as tx:
                for product_id, document in documents.items():
                    tx.update(self.name, product_id, document)
        except DocumentMissing as exc:
            return Error(NotFound(self.name, exc.doc_id))
        except TransactionConflict as exc:
            return Error(TransactionAborted(str(exc)))

        logger.info("Updated %d products", len(documents))
        return Ok(None)


__all__ = ("ProductGateway",)
