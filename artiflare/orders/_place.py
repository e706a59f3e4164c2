"""
Order placement — one atomic read / check / write over every product in the cart.

    match await place_order(store, draft):
        case Ok(order_id): ...
        case Error(InsufficientInventory(product_id=pid, available=n, requested=r)): ...
        case Error(ProductNotFound(product_id=pid)): ...
        case Error(TransactionAborted()): ...      # transient, retry

Phases, all inside one store transaction:

    read   every distinct product; a missing one aborts everything
      │
    check  every requested quantity against stock; any shortfall aborts everything
      │
    write  the order (pending / pending) + one decrement per product
      │
    commit all or nothing; a concurrent change to any product read → conflict

Nothing is written unless every read and every check passed. Lines naming the
same product are summed before the check.
"""

from __future__ import annotations

import logging

from kungfu import Error, Ok, Result

from artiflare.errors import (
    InsufficientInventory,
    OrderError,
    ProductNotFound,
    TransactionAborted,
)
from artiflare.gateway import ARTISAN_IDS_FIELD
from artiflare.orders._types import OrderDraft
from artiflare.schemas import Order, validate
from artiflare.store import SERVER_TIMESTAMP, DocumentStore, Snapshot, TransactionConflict

logger = logging.getLogger(__name__)

PRODUCTS = "products"
ORDERS = "orders"


async def place_order(store: DocumentStore, draft: OrderDraft) -> Result[str, OrderError]:
    """One attempt. Returns the new order id."""
    match validate(Order, draft.as_payload()):
        case Error(err):
            return Error(err)
        case Ok(order):
            pass

    requested = draft.requested()
    order_id = store.new_id()

    try:
        async with store.transaction() as tx:
            # Read
            products: dict[str, Snapshot] = {}
            for product_id in requested:
                snapshot = await tx.get(PRODUCTS, product_id)
                if not snapshot.exists:
                    logger.info("Order rejected: product %s not found", product_id)
                    return Error(ProductNotFound(product_id))
                products[product_id] = snapshot

            # Check
            remaining: dict[str, int] = {}
            for product_id, quantity in requested.items():
                snapshot = products[product_id]
                available = int(snapshot.get("inventory", 0))
                if quantity > available:
                    logger.info(
                        "Order rejected: product %s has %d, requested %d",
                        product_id,
                        available,
                        quantity,
                    )
                    return Error(
                        InsufficientInventory(
                            product_id=product_id,
                            available=available,
                            requested=quantity,
                            product_name=snapshot.get("name"),
                        )
                    )
                remaining[product_id] = available - quantity

            # Write
            document = order.to_document()
            document[ARTISAN_IDS_FIELD] = order.artisan_ids
            document["createdAt"] = SERVER_TIMESTAMP
            document["updatedAt"] = SERVER_TIMESTAMP
            tx.set(ORDERS, order_id, document)
            for product_id, stock in remaining.items():
                tx.update(
                    PRODUCTS,
                    product_id,
                    {"inventory": stock, "updatedAt": SERVER_TIMESTAMP},
                )
    except TransactionConflict as exc:
        return Error(TransactionAborted(str(exc)))

    logger.info(
        "Order %s committed for user %s (%d lines, total %.2f)",
        order_id,
        draft.user_id,
        len(draft.items),
        draft.total,
    )
    return Ok(order_id)


__all__ = ("place_order", "PRODUCTS", "ORDERS")
