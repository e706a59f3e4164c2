"""
Orders — the atomic placement transaction and its retrying wrapper.

    from artiflare import orders as O

    placer = O.OrderPlacer(store, O.order_retry_policy(times=3))

    match await placer.place(draft):
        case Ok(order_id): ...
        case Error(InsufficientInventory() | ProductNotFound()): ...  # never retried
        case Error(TransactionAborted()): ...                         # retries exhausted
"""

from artiflare.orders._types import OrderDraft
from artiflare.orders._place import ORDERS, PRODUCTS, place_order
from artiflare.orders._placer import (
    OrderPlacer,
    RetryPolicy,
    order_retry_policy,
    retry_policy_from_settings,
    transient,
)

__all__ = (
    "OrderDraft",
    "place_order",
    "PRODUCTS",
    "ORDERS",
    "order_retry_policy",
    "retry_policy_from_settings",
    "RetryPolicy",
    "OrderPlacer",
    "transient",
)
