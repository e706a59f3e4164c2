"""
Cart → order-item snapshots.

Name, price and image are copied at submission time so later catalog edits
never rewrite history. A customization string that does not parse as a JSON
object is dropped (and logged); it never fails the order.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from kungfu import Error, Ok, Result
from pydantic import ValidationError as PydanticValidationError

from artiflare.checkout.pricing import money
from artiflare.errors import FieldIssue, ValidationError
from artiflare.schemas import OrderItem, issues_from

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CartItem:
    """One cart line as the storefront holds it."""

    product_id: str
    name: str
    price: float
    quantity: int
    artisan_id: str
    currency: str = "INR"
    image: str | None = None
    customization: str | None = None

    @property
    def line_total(self) -> float:
        return money(self.price * self.quantity)


def cart_subtotal(cart: Sequence[CartItem]) -> float:
    return money(sum(item.price * item.quantity for item in cart))


def parse_customization(raw: str | None, product_id: str = "") -> dict[str, Any] | None:
    """Structured customizations, or ``None`` when absent or malformed."""
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Dropping customization for %s: not JSON (%s)", product_id, exc)
        return None
    if not isinstance(parsed, dict):
        logger.warning(
            "Dropping customization for %s: expected an object, got %s",
            product_id,
            type(parsed).__name__,
        )
        return None
    return parsed


def snapshot_items(cart: Sequence[CartItem]) -> Result[list[OrderItem], ValidationError]:
    """Build validated order items in cart order; field paths are ``items.<n>.<field>``."""
    items: list[OrderItem] = []
    issues: list[FieldIssue] = []
    for index, line in enumerate(cart):
        candidate: dict[str, Any] = {
            "productId": line.product_id,
            "productName": line.name,
            "quantity": line.quantity,
            "price": line.price,
            "totalPrice": line.line_total,
            "currency": line.currency,
            "artisanId": line.artisan_id,
        }
        if line.image:
            candidate["image"] = line.image
        customizations = parse_customization(line.customization, line.product_id)
        if customizations is not None:
            candidate["customizations"] = customizations
        try:
            items.append(OrderItem.model_validate(candidate))
        except PydanticValidationError as exc:
            issues.extend(issues_from(exc, prefix=("items", index)))

    if issues:
        return Error(ValidationError(tuple(issues)))
    return Ok(items)


__all__ = (
    "CartItem",
    "cart_subtotal",
    "parse_customization",
    "snapshot_items",
)
