"""
Marketplace — the explicit application context.

One object holds the store handle and everything built on it; nothing is a
module-level singleton.

    market = Marketplace.in_memory()
    match await market.open_checkout(uid, cart):
        case Ok(session):
            await session.place_order()
        case Error(NotFound()):
            ...

    async with Marketplace.from_settings(get_settings()) as market:
        ...
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from types import TracebackType
from typing import Self

import httpx
from kungfu import Error, Ok, Result

from artiflare.checkout import CartItem, CheckoutSession, ShippingPolicy, shipping_policy
from artiflare.config import Settings
from artiflare.errors import NotFound
from artiflare.gateway import (
    OrderGateway,
    ProductGateway,
    ReviewGateway,
    UserGateway,
    WishlistGateway,
)
from artiflare.inventory import InventoryLedger
from artiflare.notify import HttpOrderNotifier, OrderNotifier
from artiflare.orders import OrderPlacer, retry_policy_from_settings
from artiflare.store import DocumentStore, MemoryDocumentStore, SQLAlchemyDocumentStore


@dataclass(slots=True)
class Marketplace:
    store: DocumentStore
    notifier: OrderNotifier
    settings: Settings = field(default_factory=Settings)
    shipping: ShippingPolicy | None = None
    http_client: httpx.AsyncClient | None = None

    users: UserGateway = field(init=False)
    products: ProductGateway = field(init=False)
    orders: OrderGateway = field(init=False)
    reviews: ReviewGateway = field(init=False)
    wishlists: WishlistGateway = field(init=False)
    ledger: InventoryLedger = field(init=False)
    placer: OrderPlacer = field(init=False)

    def __post_init__(self) -> None:
        self.users = UserGateway(self.store)
        self.products = ProductGateway(self.store)
        self.orders = OrderGateway(self.store)
        self.reviews = ReviewGateway(self.store, self.products)
        self.wishlists = WishlistGateway(self.store)
        self.ledger = InventoryLedger(self.store)
        self.placer = OrderPlacer(self.store, retry_policy_from_settings(self.settings))
        if self.shipping is None:
            self.shipping = shipping_policy(self.settings)

    @classmethod
    def in_memory(
        cls,
        notifier: OrderNotifier | None = None,
        settings: Settings | None = None,
    ) -> Marketplace:
        settings = settings or Settings()
        return cls(
            store=MemoryDocumentStore(),
            notifier=notifier or HttpOrderNotifier.from_settings(settings),
            settings=settings,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Marketplace:
        """SQL-backed context with a shared HTTP client; use as ``async with``."""
        client = httpx.AsyncClient()
        return cls(
            store=SQLAlchemyDocumentStore.from_url(settings.database_url),
            notifier=HttpOrderNotifier.from_settings(settings, client=client),
            settings=settings,
            http_client=client,
        )

    async def __aenter__(self) -> Self:
        if isinstance(self.store, SQLAlchemyDocumentStore):
            await self.store.create_tables()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
        if isinstance(self.store, SQLAlchemyDocumentStore):
            await self.store.dispose()

    async def open_checkout(
        self, uid: str, cart: Sequence[CartItem]
    ) -> Result[CheckoutSession, NotFound]:
        """A fresh checkout for a signed-in user; ``NotFound`` when the profile is missing."""
        got = await self.users.get(uid)
        if got.entity is None:
            return Error(got.error or NotFound(self.users.name, uid))
        return Ok(
            CheckoutSession(
                user=got.entity,
                cart=cart,
                users=self.users,
                placer=self.placer,
                notifier=self.notifier,
                shipping=self.shipping,
                tax_rate=self.settings.tax_rate,
            )
        )


__all__ = ("Marketplace",)
