"""
Checkout — from a cart and a shipping address to a placed order.

    from artiflare import checkout as C

    session = C.CheckoutSession(
        user=user,
        cart=[C.CartItem("p1", "Clay Mug", 25.0, 2, artisan_id="a1")],
        users=users,
        placer=placer,
        notifier=notifier,
    )
    match await session.place_order():
        case Ok(placed):
            placed.order_id, placed.costs.total, placed.warning
        case Error(err):
            session.last_error          # customer-facing message
"""

from artiflare.checkout.pricing import (
    DEFAULT_TAX_RATE,
    CostBreakdown,
    FlatTierShipping,
    ShippingPolicy,
    ThresholdShipping,
    compute_costs,
    money,
    shipping_policy,
)
from artiflare.checkout.snapshots import (
    CartItem,
    cart_subtotal,
    parse_customization,
    snapshot_items,
)
from artiflare.checkout.addresses import AddressBook, AddressError, normalize_defaults
from artiflare.checkout.display import (
    artisan_label,
    display_name,
    format_phone_number,
    initials,
)
from artiflare.checkout.messages import (
    GENERIC_FAILURE,
    NOTIFICATION_WARNING,
    failure_message,
    message_for_code,
)
from artiflare.checkout.session import CheckoutSession, CheckoutState, PlacedOrder

__all__ = (
    # Pricing
    "DEFAULT_TAX_RATE",
    "money",
    "ShippingPolicy",
    "ThresholdShipping",
    "FlatTierShipping",
    "shipping_policy",
    "CostBreakdown",
    "compute_costs",
    # Cart
    "CartItem",
    "cart_subtotal",
    "parse_customization",
    "snapshot_items",
    # Addresses
    "AddressBook",
    "AddressError",
    "normalize_defaults",
    # Display
    "format_phone_number",
    "display_name",
    "initials",
    "artisan_label",
    # Messages
    "GENERIC_FAILURE",
    "NOTIFICATION_WARNING",
    "failure_message",
    "message_for_code",
    # Session
    "CheckoutState",
    "PlacedOrder",
    "CheckoutSession",
)
