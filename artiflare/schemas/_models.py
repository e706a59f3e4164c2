"""
Entity models — shape + constraints for every persisted document.

Attribute names are snake_case; stored documents use the camelCase keys the
storefront has always written (``zipCode``, ``artisanId``...). Models accept
either spelling on input and dump by alias.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    TypeAdapter,
    model_serializer,
)

NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    _url_adapter.validate_python(value)
    return value


Url = Annotated[str, AfterValidator(_check_url)]


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class Role(StrEnum):
    CUSTOMER = "customer"
    ARTISAN = "artisan"
    ADMIN = "admin"


class OrderStatus(StrEnum):
    """
    Order lifecycle.

        pending → processing → shipped → delivered
            └──────────┴───────────┴──→ cancelled

    ``delivered`` and ``cancelled`` are terminal.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_transition(self, target: OrderStatus) -> bool:
        if self.is_terminal:
            return False
        if target is OrderStatus.CANCELLED:
            return True
        return _NEXT.get(self) is target


_NEXT: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}


class PaymentStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Entity(BaseModel):
    """Common config: alias-or-name input, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_document(self) -> dict[str, Any]:
        """Dump for persistence: camelCase keys, no ``None`` values, no ``id``."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"id"}
        )


class Timestamped(Entity):
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


# ═══════════════════════════════════════════════════════════════════════════════
# User
# ═══════════════════════════════════════════════════════════════════════════════


class Address(Entity):
    id: NonEmpty
    street: NonEmpty
    city: NonEmpty
    state: NonEmpty
    zip_code: NonEmpty = Field(alias="zipCode")
    country: NonEmpty
    is_default: bool = Field(default=False, alias="isDefault")
    # Explicitly nullable: clearing a label stores null, never omits the key.
    label: str | None = None
    phone_number: str | None = Field(default=None, alias="phoneNumber")

    @model_serializer(mode="wrap")
    def _keep_label(self, handler: Any) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        data["label"] = self.label
        return data


class Preferences(Entity):
    notifications: bool = True
    email_updates: bool = Field(default=True, alias="emailUpdates")
    theme: str = "light"


class User(Timestamped):
    uid: NonEmpty
    display_name: NonEmpty = Field(alias="displayName")
    email: EmailStr | Literal[""] = ""
    role: Role = Role.CUSTOMER
    photo_url: str | None = Field(default=None, alias="photoURL")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    addresses: list[Address] | None = None
    bio: str | None = None
    company_name: str | None = Field(default=None, alias="companyName")
    is_verified: bool | None = Field(default=None, alias="isVerified")
    last_login: datetime | None = Field(default=None, alias="lastLogin")
    preferences: Preferences | None = None

    # Artisan settings
    payout_schedule: str | None = Field(default=None, alias="payoutSchedule")
    automatic_payout: bool | None = Field(default=None, alias="automaticPayout")
    bank_account: str | None = Field(default=None, alias="bankAccount")
    shipping_from: str | None = Field(default=None, alias="shippingFrom")
    shipping_standard: bool | None = Field(default=None, alias="shippingStandard")
    shipping_express: bool | None = Field(default=None, alias="shippingExpress")
    shipping_international: bool | None = Field(default=None, alias="shippingInternational")
    notify_new_order: bool | None = Field(default=None, alias="notifyNewOrder")
    notify_order_shipped: bool | None = Field(default=None, alias="notifyOrderShipped")
    notify_payment_received: bool | None = Field(default=None, alias="notifyPaymentReceived")
    notify_new_order_email: bool | None = Field(default=None, alias="notifyNewOrderEmail")
    notify_new_order_sms: bool | None = Field(default=None, alias="notifyNewOrderSms")

    @property
    def default_address(self) -> Address | None:
        return next((a for a in self.addresses or [] if a.is_default), None)


# ═══════════════════════════════════════════════════════════════════════════════
# Product
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingInfo(Entity):
    weight: float | None = None
    dimensions: str | None = None
    free_shipping: bool | None = Field(default=None, alias="freeShipping")
    shipping_time: str | None = Field(default=None, alias="shippingTime")


class CustomizationOptions(Entity):
    text: bool | None = None
    color: bool | None = None
    size: bool | None = None
    material: bool | None = None


class Product(Timestamped):
    id: str | None = None
    name: NonEmpty
    description: NonEmpty
    price: float = Field(gt=0)
    discounted_price: float | None = Field(default=None, gt=0, alias="discountedPrice")
    currency: str = "INR"
    images: list[str] = Field(min_length=1)
    category: NonEmpty
    subcategory: str | None = None
    artisan_id: NonEmpty = Field(alias="artisanId")
    inventory: int = Field(ge=0)
    attributes: dict[str, Any] | None = None
    tags: list[str] | None = None
    is_customizable: bool | None = Field(default=None, alias="isCustomizable")
    average_rating: float | None = Field(default=None, ge=0, le=5, alias="averageRating")
    total_reviews: int | None = Field(default=None, ge=0, alias="totalReviews")
    occasion: str | None = None
    materials: list[str] | None = None
    status: str | None = None
    shipping_info: ShippingInfo | None = Field(default=None, alias="shippingInfo")
    customization_options: CustomizationOptions | None = Field(
        default=None, alias="customizationOptions"
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


class OrderItem(Entity):
    product_id: NonEmpty = Field(alias="productId")
    product_name: str = Field(alias="productName")
    quantity: int = Field(ge=1)
    price: float = Field(gt=0)
    total_price: float = Field(gt=0, alias="totalPrice")
    currency: str
    image: str | None = None
    customizations: dict[str, Any] | None = None
    artisan_id: NonEmpty = Field(alias="artisanId")


class Order(Timestamped):
    id: str | None = None
    user_id: NonEmpty = Field(alias="userId")
    items: list[OrderItem] = Field(min_length=1)
    subtotal: float = Field(default=0, ge=0)
    total: float = Field(gt=0)
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: Address = Field(alias="shippingAddress")
    payment_method: str = Field(alias="paymentMethod")
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, alias="paymentStatus")
    shipping_method: str = Field(alias="shippingMethod")
    shipping_cost: float = Field(ge=0, alias="shippingCost")
    discount: float | None = None
    tax: float | None = None
    tracking_number: str | None = Field(default=None, alias="trackingNumber")
    notes: str | None = None

    @property
    def artisan_ids(self) -> list[str]:
        seen: dict[str, None] = {}
        for item in self.items:
            seen.setdefault(item.artisan_id, None)
        return list(seen)


# ═══════════════════════════════════════════════════════════════════════════════
# Review
# ═══════════════════════════════════════════════════════════════════════════════


class ArtisanResponse(Entity):
    response: NonEmpty
    created_at: datetime | None = Field(default=None, alias="createdAt")


class Review(Timestamped):
    id: str | None = None
    product_id: NonEmpty = Field(alias="productId")
    user_id: NonEmpty = Field(alias="userId")
    user_name: NonEmpty = Field(alias="userName")
    rating: int = Field(ge=1, le=5)
    comment: NonEmpty
    images: list[Url] | None = None
    artisan_response: ArtisanResponse | None = Field(default=None, alias="artisanResponse")


# ═══════════════════════════════════════════════════════════════════════════════
# Wishlist
# ═══════════════════════════════════════════════════════════════════════════════


class Wishlist(Timestamped):
    id: str | None = None
    user_id: NonEmpty = Field(alias="userId")
    items: list[str] = Field(default_factory=list)


__all__ = (
    "Role",
    "OrderStatus",
    "PaymentStatus",
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
)
