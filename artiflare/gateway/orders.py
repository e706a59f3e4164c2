"""
Orders — created only by the order orchestrator; read and advanced here.
"""

from __future__ import annotations

import logging

from kungfu import Error, Ok, Result

from artiflare.errors import FieldIssue, NotFound, TransactionAborted, ValidationError
from artiflare.gateway._base import DEFAULT_PAGE_SIZE, Collection, ListPage
from artiflare.schemas import Order, OrderStatus
from artiflare.store import OrderBy, Snapshot

logger = logging.getLogger(__name__)

# Denormalized on every order so artisans can query their orders directly.
ARTISAN_IDS_FIELD = "artisanIds"


class OrderGateway(Collection[Order]):
    name = "orders"
    schema = Order

    async def for_user(
        self,
        user_id: str,
        page_size: int | None = DEFAULT_PAGE_SIZE,
        cursor: Snapshot | None = None,
    ) -> ListPage[Order]:
        """A customer's orders, newest first."""
        return await self.list(
            [("userId", "==", user_id)],
            order_by=OrderBy("createdAt", descending=True),
            page_size=page_size,
            cursor=cursor,
        )

    async def for_artisan(
        self,
        artisan_id: str,
        page_size: int | None = DEFAULT_PAGE_SIZE,
        cursor: Snapshot | None = None,
    ) -> ListPage[Order]:
        """Orders containing at least one of the artisan's products, newest first."""
        return await self.list(
            [(ARTISAN_IDS_FIELD, "array-contains", artisan_id)],
            order_by=OrderBy("createdAt", descending=True),
            page_size=page_size,
            cursor=cursor,
        )

    async def set_status(
        self, order_id: str, status: OrderStatus
    ) -> Result[Order, ValidationError | NotFound | TransactionAborted]:
        """Advance the lifecycle; illegal transitions are validation errors."""
        got = await self.get(order_id)
        if got.entity is None:
            return Error(NotFound(self.name, order_id))

        current = got.entity.status
        if current == status:
            return Ok(got.entity)
        if not current.can_transition(status):
            return Error(
                ValidationError(
                    (FieldIssue("status", f"cannot move from {current} to {status}"),)
                )
            )

        logger.info("Order %s: %s -> %s", order_id, current, status)
        return await self.update(order_id, {"status": status})


__all__ = ("OrderGateway", "ARTISAN_IDS_FIELD")
