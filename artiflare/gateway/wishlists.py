"""
Wishlists — one per user, looked up by ``userId``; items are unique product ids.
"""

from __future__ import annotations

from typing import Literal

from kungfu import Result

from artiflare.errors import NotFound, TransactionAborted, ValidationError
from artiflare.gateway._base import Collection
from artiflare.schemas import Wishlist


class WishlistGateway(Collection[Wishlist]):
    name = "wishlists"
    schema = Wishlist

    async def for_user(self, user_id: str) -> Wishlist | None:
        return await self.find_one("userId", user_id)

    async def toggle(
        self,
        user_id: str,
        product_id: str,
        action: Literal["add", "remove"],
    ) -> Result[Wishlist, ValidationError | NotFound | TransactionAborted]:
        """Add or remove one product; creates the wishlist on first add."""
        current = await self.for_user(user_id)

        if current is None:
            items = [product_id] if action == "add" else []
            return await self.create({"userId": user_id, "items": items})

        if action == "add":
            items = list(dict.fromkeys([*current.items, product_id]))
        else:
            items = [item for item in current.items if item != product_id]

        return await self.update(str(current.id), {"items": items})


__all__ = ("WishlistGateway",)
