"""
Schemas — entity shapes, constraints, and the validation entry point.

    from artiflare import schemas as S

    match S.validate(S.Order, payload):
        case Ok(order): ...
        case Error(err): ...
"""

from artiflare.schemas._models import (
    Address,
    ArtisanResponse,
    CustomizationOptions,
    Entity,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Preferences,
    Product,
    Review,
    Role,
    ShippingInfo,
    Timestamped,
    User,
    Wishlist,
)
from artiflare.schemas._validate import issues_from, validate, validate_partial

__all__ = (
    # Enums
    "Role",
    "OrderStatus",
    "PaymentStatus",
    # Models
    "Entity",
    "Timestamped",
    "Address",
    "Preferences",
    "User",
    "ShippingInfo",
    "CustomizationOptions",
    "Product",
    "OrderItem",
    "Order",
    "ArtisanResponse",
    "Review",
    "Wishlist",
    # Validation
    "validate",
    "validate_partial",
    "issues_from",
)
