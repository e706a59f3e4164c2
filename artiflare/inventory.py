"""
Inventory ledger — single-product stock adjustment with a non-negative floor.

    ledger = InventoryLedger(store)

    match await ledger.adjust("p1", 3, "subtract"):
        case Ok(remaining): ...
        case Error(InsufficientInventory(available=n)): ...
        case Error(ProductNotFound()): ...

The read and the write happen in one store transaction, so a concurrent
adjustment either sees this one's result or conflicts. Order placement does
not call this per line (that would not be atomic across lines); it inlines the
same check over every product of the cart, see ``artiflare.orders``.
"""

from __future__ import annotations

import logging
from typing import Literal

from kungfu import Error, Ok, Result

from artiflare.errors import (
    FieldIssue,
    InsufficientInventory,
    LedgerError,
    ProductNotFound,
    TransactionAborted,
    ValidationError,
)
from artiflare.store import SERVER_TIMESTAMP, DocumentStore, TransactionConflict

logger = logging.getLogger(__name__)

type Direction = Literal["add", "subtract"]

PRODUCTS = "products"


def apply_delta(current: int, delta: int, direction: Direction) -> int:
    return current + delta if direction == "add" else current - delta


class InventoryLedger:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def adjust(
        self,
        product_id: str,
        delta: int,
        direction: Direction,
    ) -> Result[int, LedgerError]:
        """Return the new stock level."""
        if isinstance(delta, bool) or not isinstance(delta, int) or delta <= 0:
            return Error(
                ValidationError((FieldIssue("delta", "must be a positive integer"),))
            )
        if direction not in ("add", "subtract"):
            return Error(
                ValidationError((FieldIssue("direction", "must be 'add' or 'subtract'"),))
            )

        try:
            async with self.store.transaction() as tx:
                snapshot = await tx.get(PRODUCTS, product_id)
                if not snapshot.exists:
                    return Error(ProductNotFound(product_id))

                current = int(snapshot.get("inventory", 0))
                updated = apply_delta(current, delta, direction)
                if updated < 0:
                    return Error(
                        InsufficientInventory(
                            product_id=product_id,
                            available=current,
                            requested=delta,
                            product_name=snapshot.get("name"),
                        )
                    )

                tx.update(
                    PRODUCTS,
                    product_id,
                    {"inventory": updated, "updatedAt": SERVER_TIMESTAMP},
                )
        except TransactionConflict as exc:
            logger.info("Inventory adjust on %s aborted: %s", product_id, exc)
            return Error(TransactionAborted(str(exc)))

        logger.debug("Inventory %s: %d -> %d", product_id, current, updated)
        return Ok(updated)


__all__ = ("InventoryLedger", "Direction", "apply_delta")
