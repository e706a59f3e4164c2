from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

import pytest
from kungfu import Error, Ok

from artiflare.checkout import (
    NOTIFICATION_WARNING,
    AddressBook,
    CartItem,
    CheckoutSession,
    CheckoutState,
    FlatTierShipping,
    ThresholdShipping,
    cart_subtotal,
    compute_costs,
    normalize_defaults,
    parse_customization,
    snapshot_items,
)
from artiflare.errors import CheckoutRejected, InsufficientInventory, NotFound, ValidationError
from artiflare.gateway import OrderGateway, UserGateway
from artiflare.orders import OrderPlacer
from artiflare.schemas import Address, User
from artiflare.store import MemoryDocumentStore
from tests.factories import (
    ARTISAN,
    CUSTOMER,
    RecordingNotifier,
    address_data,
    error_of,
    value_of,
)

FIXED_NOW = datetime(2024, 5, 17, 9, 0, tzinfo=UTC)


def mug(quantity: int = 2, **extra: object) -> CartItem:
    return CartItem("mug", "Clay Mug", 25.0, quantity, artisan_id=ARTISAN, **extra)  # type: ignore[arg-type]


async def open_session(
    users: UserGateway,
    placer: OrderPlacer,
    cart: list[CartItem],
    notifier: RecordingNotifier | None = None,
    uid: str = CUSTOMER,
) -> CheckoutSession:
    user = (await users.get(uid)).entity
    assert user is not None
    return CheckoutSession(
        user=user,
        cart=cart,
        users=users,
        placer=placer,
        notifier=notifier or RecordingNotifier(),
        clock=lambda: FIXED_NOW,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Pricing
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    ("subtotal", "shipping"),
    [(200.0, 0.0), (100.0, 0.0), (99.99, 5.99), (50.0, 5.99), (49.99, 9.99), (0.0, 9.99)],
)
def test_threshold_shipping(subtotal: float, shipping: float) -> None:
    assert ThresholdShipping().cost(subtotal) == shipping


def test_flat_tier_shipping() -> None:
    policy = FlatTierShipping()
    assert policy.cost(10.0, "standard") == 5.99
    assert policy.cost(10.0, "express") == 12.99
    assert policy.cost(10.0, "sos") == 24.99
    assert policy.cost(10.0, "teleport") == 5.99


def test_costs_include_tax_and_shipping() -> None:
    costs = compute_costs(200.0, ThresholdShipping())
    assert (costs.subtotal, costs.shipping, costs.tax, costs.total) == (200.0, 0.0, 16.0, 216.0)

    costs = compute_costs(33.33, ThresholdShipping(), discount=1.0)
    assert costs.tax == 2.67
    assert costs.total == round(33.33 + 9.99 + 2.67 - 1.0, 2)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart snapshots
# ═══════════════════════════════════════════════════════════════════════════════


def test_snapshot_copies_cart_lines_in_order() -> None:
    cart = [mug(2, image="https://example.com/mug.jpg"), CartItem("vase", "Vase", 60.0, 1, ARTISAN)]
    items = value_of(snapshot_items(cart))
    assert [i.product_id for i in items] == ["mug", "vase"]
    assert items[0].total_price == 50.0
    assert items[0].image == "https://example.com/mug.jpg"
    assert cart_subtotal(cart) == 110.0


def test_structured_customization_is_kept() -> None:
    items = value_of(snapshot_items([mug(customization='{"text": "For Asha"}')]))
    assert items[0].customizations == {"text": "For Asha"}


def test_malformed_customization_is_dropped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="artiflare.checkout"):
        items = value_of(snapshot_items([mug(customization="{not json"), mug(customization="[1, 2]")]))
    assert all(i.customizations is None for i in items)
    assert len([r for r in caplog.records if "Dropping customization" in r.message]) == 2
    assert parse_customization(None) is None


def test_snapshot_reports_line_paths() -> None:
    err = error_of(snapshot_items([mug(), mug(quantity=0)]))
    assert "items.1.quantity" in err.fields
    assert all(f.startswith("items.1.") for f in err.fields)


# ═══════════════════════════════════════════════════════════════════════════════
# Address book
# ═══════════════════════════════════════════════════════════════════════════════


def _address(id: str, default: bool = False) -> Address:
    return Address.model_validate(address_data(id=id, isDefault=default))


def test_normalize_defaults_keeps_exactly_one() -> None:
    both = [_address("a", True), _address("b", True)]
    assert [a.is_default for a in normalize_defaults(both)] == [True, False]
    assert [a.is_default for a in normalize_defaults(both, "b")] == [False, True]
    none = [_address("a"), _address("b")]
    assert [a.is_default for a in normalize_defaults(none)] == [True, False]
    assert normalize_defaults([]) == []


async def test_first_address_becomes_default(users: UserGateway) -> None:
    await users.create({"uid": "u1", "displayName": "Asha"})
    book = AddressBook(users)
    fields = {k: v for k, v in address_data().items() if k not in ("id", "isDefault")}

    user = value_of(await book.add("u1", fields))
    assert user.addresses is not None and len(user.addresses) == 1
    assert user.addresses[0].is_default

    user = value_of(await book.add("u1", {**fields, "street": "5 Lake Rd"}, make_default=True))
    assert [a.is_default for a in user.addresses or []] == [False, True]


async def test_invalid_address_is_rejected(users: UserGateway) -> None:
    await users.create({"uid": "u1", "displayName": "Asha"})
    err = error_of(await AddressBook(users).add("u1", {"street": "", "city": "Pune"}))
    assert isinstance(err, ValidationError)
    assert "street" in err.fields


async def test_last_address_cannot_be_deleted(users: UserGateway, seeded: dict[str, str]) -> None:
    book = AddressBook(users)
    err = error_of(await book.remove(CUSTOMER, "home"))
    assert isinstance(err, CheckoutRejected)
    user = (await users.get(CUSTOMER)).entity
    assert user is not None and [a.id for a in user.addresses or []] == ["home"]


async def test_deleting_default_promotes_remaining(users: UserGateway, seeded: dict[str, str]) -> None:
    book = AddressBook(users)
    fields = {k: v for k, v in address_data().items() if k not in ("id", "isDefault")}
    user = value_of(await book.add(CUSTOMER, {**fields, "label": "Work"}))
    work = next(a for a in user.addresses or [] if a.id != "home")

    user = value_of(await book.remove(CUSTOMER, "home"))
    assert [a.id for a in user.addresses or []] == [work.id]
    assert (user.addresses or [])[0].is_default

    assert error_of(await book.remove(CUSTOMER, "ghost")) == NotFound("addresses", "ghost")


async def test_edit_and_set_default(users: UserGateway, seeded: dict[str, str]) -> None:
    book = AddressBook(users)
    fields = {k: v for k, v in address_data().items() if k not in ("id", "isDefault")}
    user = value_of(await book.add(CUSTOMER, fields))
    second = (user.addresses or [])[1].id

    user = value_of(await book.edit(CUSTOMER, second, {"city": "Mumbai", "isDefault": True}))
    edited = next(a for a in user.addresses or [] if a.id == second)
    assert edited.city == "Mumbai"
    assert not edited.is_default

    user = value_of(await book.set_default(CUSTOMER, second))
    assert user.default_address is not None and user.default_address.id == second


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


async def test_default_address_is_preselected(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    session = await open_session(users, placer, [mug()])
    assert session.state is CheckoutState.ADDRESS_SELECTED
    assert session.selected_address_id == "home"


async def test_happy_path(
    store: MemoryDocumentStore,
    users: UserGateway,
    placer: OrderPlacer,
    orders: OrderGateway,
    seeded: dict[str, str],
) -> None:
    await store.update("products", "mug", {"price": 100.0, "inventory": 10})
    notifier = RecordingNotifier()
    cart = [CartItem("mug", "Clay Mug", 100.0, 2, artisan_id=ARTISAN)]
    session = await open_session(users, placer, cart, notifier)

    placed = value_of(await session.place_order())

    assert placed.costs.total == 216.0
    assert placed.warning is None
    assert session.state is CheckoutState.PLACED
    assert session.cart == []
    assert (await store.get("products", "mug")).data["inventory"] == 8

    order = (await orders.get(placed.order_id)).entity
    assert order is not None
    assert (order.subtotal, order.shipping_cost, order.tax, order.total) == (200.0, 0.0, 16.0, 216.0)
    assert order.shipping_address.id == "home"
    assert order.payment_method == "cod"

    [email] = notifier.sent
    assert email.customer.name == "Arjun"
    assert email.artisan.name == "Meera's Pottery"
    assert email.artisan.email == "meera@example.com"
    assert email.order.id == placed.order_id
    assert email.order.date == "2024-05-17"
    assert email.order.products[0].quantity == 2


async def test_stockout_keeps_cart_and_explains(
    store: MemoryDocumentStore, users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    cart = [CartItem("vase", "Glazed Vase", 60.0, 2, artisan_id=ARTISAN)]
    notifier = RecordingNotifier()
    session = await open_session(users, placer, cart, notifier)

    err = error_of(await session.place_order())

    assert isinstance(err, InsufficientInventory)
    assert session.state is CheckoutState.FAILED
    assert session.last_error == "Sorry, only 1 of Glazed Vase left in stock."
    assert len(session.cart) == 1
    assert notifier.sent == []
    assert store.dump("orders") == {}

    session.cart[0] = CartItem("vase", "Glazed Vase", 60.0, 1, artisan_id=ARTISAN)
    assert isinstance(await session.place_order(), Ok)
    assert session.state is CheckoutState.PLACED


async def test_out_of_stock_message(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    cart = [CartItem("bowl", "Serving Bowl", 40.0, 1, artisan_id=ARTISAN)]
    session = await open_session(users, placer, cart)
    assert isinstance(await session.place_order(), Error)
    assert session.last_error == "Sorry, Serving Bowl is out of stock."


async def test_missing_product_message(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    session = await open_session(users, placer, [mug(1), CartItem("gone", "Gone", 5.0, 1, ARTISAN)])
    assert isinstance(await session.place_order(), Error)
    assert session.last_error == "One of the products in your cart is no longer available."


@pytest.mark.parametrize("notifier", [RecordingNotifier(fail=True), RecordingNotifier(explode=True)])
async def test_notification_failure_is_only_a_warning(
    store: MemoryDocumentStore,
    users: UserGateway,
    placer: OrderPlacer,
    seeded: dict[str, str],
    notifier: RecordingNotifier,
) -> None:
    session = await open_session(users, placer, [mug()], notifier)

    placed = value_of(await session.place_order())

    assert placed.notification_error is not None
    assert placed.warning == NOTIFICATION_WARNING
    assert session.state is CheckoutState.PLACED
    assert len(store.dump("orders")) == 1


async def test_cannot_place_without_address(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    await users.create({"uid": "bare", "displayName": "Bare"})
    session = await open_session(users, placer, [mug()], uid="bare")
    assert session.state is CheckoutState.NO_ADDRESS

    err = error_of(await session.place_order())
    assert isinstance(err, CheckoutRejected)
    assert session.state is CheckoutState.NO_ADDRESS


async def test_cannot_place_empty_cart(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    session = await open_session(users, placer, [])
    assert error_of(await session.place_order()) == CheckoutRejected("Your cart is empty.")


async def test_double_submission_places_one_order(
    store: MemoryDocumentStore, users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    session = await open_session(users, placer, [mug()])

    first, second = await asyncio.gather(session.place_order(), session.place_order())

    assert isinstance(first, Ok)
    assert isinstance(error_of(second), CheckoutRejected)
    assert len(store.dump("orders")) == 1
    assert isinstance(error_of(await session.place_order()), CheckoutRejected)


async def test_add_address_selects_it(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    await users.create({"uid": "bare", "displayName": "Bare"})
    session = await open_session(users, placer, [mug()], uid="bare")
    fields = {k: v for k, v in address_data().items() if k not in ("id", "isDefault")}

    added = value_of(await session.add_address(fields))

    assert session.selected_address_id == added.id
    assert session.state is CheckoutState.ADDRESS_SELECTED
    assert added.is_default
    assert isinstance(await session.place_order(), Ok)


async def test_removing_selected_address_clears_selection(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    session = await open_session(users, placer, [mug()])
    fields = {k: v for k, v in address_data().items() if k not in ("id", "isDefault")}
    added = value_of(await session.add_address(fields))

    value_of(await session.remove_address(added.id))

    assert session.selected_address_id is None
    assert session.state is CheckoutState.NO_ADDRESS
    assert value_of(session.select_address("home")).id == "home"
    assert isinstance(error_of(session.select_address("ghost")), CheckoutRejected)


async def test_delivery_option_changes_shipping(
    users: UserGateway, placer: OrderPlacer, seeded: dict[str, str]
) -> None:
    user = (await users.get(CUSTOMER)).entity
    assert isinstance(user, User)
    session = CheckoutSession(
        user=user,
        cart=[mug(1)],
        users=users,
        placer=placer,
        notifier=RecordingNotifier(),
        shipping=FlatTierShipping(),
    )
    session.select_delivery_option("express")
    assert session.costs.shipping == 12.99
    assert session.costs.total == round(25.0 + 12.99 + 2.0, 2)
