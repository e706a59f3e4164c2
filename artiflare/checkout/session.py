"""
Checkout session — one customer's walk from cart to placed order.

    NO_ADDRESS ──select/add──▶ ADDRESS_SELECTED ──place──▶ PLACING ─┬─▶ PLACED
        ▲                           ▲                               │
        └──remove selected──────────┴──────────── next attempt ◀── FAILED

- ``PLACING`` rejects a second submission, so one action yields one order.
- ``PLACED`` is terminal; the cart has been cleared.
- ``FAILED`` keeps the cart and the selected address so the customer can
  retry without re-entering anything.

The confirmation email is sent after the order commits. Its failure is a
warning on the outcome and never undoes the order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from kungfu import Error, Ok, Result

from artiflare import lift as L
from artiflare.checkout.addresses import AddressBook, AddressError
from artiflare.checkout.display import artisan_label, display_name
from artiflare.checkout.messages import NOTIFICATION_WARNING, failure_message
from artiflare.checkout.pricing import (
    DEFAULT_TAX_RATE,
    CostBreakdown,
    ShippingPolicy,
    ThresholdShipping,
    compute_costs,
)
from artiflare.checkout.snapshots import CartItem, cart_subtotal, snapshot_items
from artiflare.errors import CheckoutError, CheckoutRejected, NotificationFailure
from artiflare.gateway import UserGateway
from artiflare.notify import OrderEmailPayload, OrderNotifier, OrderSummary, Party, ProductLine
from artiflare.orders import OrderDraft, OrderPlacer
from artiflare.schemas import Address, User
from artiflare.store import utcnow

logger = logging.getLogger(__name__)


class CheckoutState(StrEnum):
    NO_ADDRESS = "no_address"
    ADDRESS_SELECTED = "address_selected"
    PLACING = "placing"
    PLACED = "placed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PlacedOrder:
    order_id: str
    costs: CostBreakdown
    notification_error: NotificationFailure | None = None

    @property
    def warning(self) -> str | None:
        return NOTIFICATION_WARNING if self.notification_error else None


class CheckoutSession:
    def __init__(
        self,
        *,
        user: User,
        cart: Sequence[CartItem],
        users: UserGateway,
        placer: OrderPlacer,
        notifier: OrderNotifier,
        shipping: ShippingPolicy | None = None,
        tax_rate: float = DEFAULT_TAX_RATE,
        payment_method: str = "cod",
        delivery_option: str = "standard",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.user = user
        self.cart: list[CartItem] = list(cart)
        self.users = users
        self.addresses = AddressBook(users)
        self.placer = placer
        self.notifier = notifier
        self.shipping = shipping or ThresholdShipping()
        self.tax_rate = tax_rate
        self.payment_method = payment_method
        self.delivery_option = delivery_option
        self._clock = clock

        self.selected_address_id: str | None = None
        self.last_error: str | None = None
        self.order_id: str | None = None
        self.state = CheckoutState.NO_ADDRESS

        default = user.default_address
        if default is not None:
            self._select(default.id)

    # ───────────────────────────────────────────────────────────────────────────
    # Selections
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def selected_address(self) -> Address | None:
        return next(
            (a for a in self.user.addresses or [] if a.id == self.selected_address_id),
            None,
        )

    def _busy(self) -> CheckoutRejected | None:
        if self.state is CheckoutState.PLACING:
            return CheckoutRejected("Your order is already being placed.")
        if self.state is CheckoutState.PLACED:
            return CheckoutRejected("This order has already been placed.")
        return None

    def _select(self, address_id: str | None) -> None:
        self.selected_address_id = address_id
        self.state = (
            CheckoutState.ADDRESS_SELECTED if address_id else CheckoutState.NO_ADDRESS
        )

    def select_address(self, address_id: str) -> Result[Address, CheckoutRejected]:
        if rejected := self._busy():
            return Error(rejected)
        if not any(a.id == address_id for a in self.user.addresses or []):
            return Error(CheckoutRejected("Selected address not found."))
        self._select(address_id)
        return Ok(self.selected_address)  # type: ignore[arg-type]

    def select_payment_method(self, method: str) -> None:
        self.payment_method = method

    def select_delivery_option(self, option: str) -> None:
        self.delivery_option = option

    # ───────────────────────────────────────────────────────────────────────────
    # Address management (save → updated user → select, in that order)
    # ───────────────────────────────────────────────────────────────────────────

    async def add_address(
        self, fields: Mapping[str, Any], make_default: bool = False
    ) -> Result[Address, AddressError]:
        """Save a new address and select it."""
        if rejected := self._busy():
            return Error(rejected)
        known = {a.id for a in self.user.addresses or []}
        match await self.addresses.add(self.user.uid, fields, make_default):
            case Error(err):
                return Error(err)
            case Ok(user):
                self.user = user
        added = next(a for a in user.addresses or [] if a.id not in known)
        self._select(added.id)
        return Ok(added)

    async def edit_address(
        self, address_id: str, changes: Mapping[str, Any]
    ) -> Result[User, AddressError]:
        if rejected := self._busy():
            return Error(rejected)
        match await self.addresses.edit(self.user.uid, address_id, changes):
            case Error(err):
                return Error(err)
            case Ok(user):
                self.user = user
                return Ok(user)

    async def remove_address(self, address_id: str) -> Result[User, AddressError]:
        """Delete an address; removing the selected one clears the selection."""
        if rejected := self._busy():
            return Error(rejected)
        match await self.addresses.remove(self.user.uid, address_id):
            case Error(err):
                return Error(err)
            case Ok(user):
                self.user = user
        if self.selected_address_id == address_id:
            self._select(None)
        return Ok(user)

    # ───────────────────────────────────────────────────────────────────────────
    # Costs
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def subtotal(self) -> float:
        return cart_subtotal(self.cart)

    @property
    def costs(self) -> CostBreakdown:
        return compute_costs(
            self.subtotal,
            self.shipping,
            delivery_option=self.delivery_option,
            tax_rate=self.tax_rate,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Place order
    # ───────────────────────────────────────────────────────────────────────────

    def _precheck(self) -> Result[Address, CheckoutRejected]:
        if rejected := self._busy():
            return Error(rejected)
        if not self.cart:
            return Error(CheckoutRejected("Your cart is empty."))
        if not self.user.addresses:
            return Error(CheckoutRejected("Please add and select a shipping address."))
        if self.selected_address_id is None:
            return Error(CheckoutRejected("Please select a shipping address."))
        address = self.selected_address
        if address is None:
            return Error(CheckoutRejected("Selected address not found."))
        return Ok(address)

    def _fail(self, error: CheckoutError) -> Result[PlacedOrder, CheckoutError]:
        self.state = CheckoutState.FAILED
        self.last_error = failure_message(error)
        logger.info("Checkout for %s failed: %s", self.user.uid, error)
        return Error(error)

    async def place_order(self, notes: str | None = None) -> Result[PlacedOrder, CheckoutError]:
        match self._precheck():
            case Error(rejected):
                self.last_error = failure_message(rejected)
                return Error(rejected)
            case Ok(address):
                pass

        self.state = CheckoutState.PLACING
        self.last_error = None
        costs = self.costs

        match snapshot_items(self.cart):
            case Error(err):
                return self._fail(err)
            case Ok(items):
                pass

        draft = OrderDraft(
            user_id=self.user.uid,
            items=items,
            shipping_address=address,
            payment_method=self.payment_method,
            shipping_method=self.delivery_option,
            subtotal=costs.subtotal,
            shipping_cost=costs.shipping,
            tax=costs.tax,
            total=costs.total,
            discount=costs.discount,
            notes=notes,
        )

        match await self.placer.place(draft):
            case Error(err):
                return self._fail(err)
            case Ok(order_id):
                self.order_id = order_id

        notice = await self._notify(order_id, costs)

        self.cart.clear()
        self.state = CheckoutState.PLACED
        return Ok(PlacedOrder(order_id=order_id, costs=costs, notification_error=notice))

    # ───────────────────────────────────────────────────────────────────────────
    # Notification (best effort)
    # ───────────────────────────────────────────────────────────────────────────

    async def build_email(self, order_id: str, costs: CostBreakdown) -> OrderEmailPayload:
        """Artisan is the owner of the first cart line."""
        artisan: User | None = None
        if self.cart:
            artisan = (await self.users.get(self.cart[0].artisan_id)).entity

        return OrderEmailPayload(
            customer=Party(
                email=self.user.email,
                name=display_name(self.user),
            ),
            artisan=Party(
                email=artisan.email if artisan else "",
                name=artisan_label(artisan),
            ),
            order=OrderSummary(
                id=order_id,
                products=[
                    ProductLine(
                        name=item.name,
                        image=item.image or "",
                        price=item.price,
                        quantity=item.quantity,
                    )
                    for item in self.cart
                ],
                total=costs.total,
                date=self._clock().date().isoformat(),
            ),
        )

    async def _send(self, order_id: str, costs: CostBreakdown) -> Result[None, NotificationFailure]:
        payload = await self.build_email(order_id, costs)
        return await self.notifier.send(payload)

    async def _notify(self, order_id: str, costs: CostBreakdown) -> NotificationFailure | None:
        sent = await L.catching_async(
            lambda: self._send(order_id, costs),
            on_error=lambda e: NotificationFailure(f"{type(e).__name__}: {e}"),
        )
        match sent:
            case Ok(Ok(_)):
                return None
            case Ok(Error(err)) | Error(err):
                logger.warning("Order %s placed but confirmation email failed: %s", order_id, err)
                return err
        return None


__all__ = ("CheckoutState", "PlacedOrder", "CheckoutSession")
