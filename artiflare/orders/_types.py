"""
Order placement inputs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from artiflare.schemas import Address, OrderItem, OrderStatus, PaymentStatus


@dataclass(frozen=True, slots=True)
class OrderDraft:
    """
    Everything needed to write one order: item snapshots in cart order, the
    address snapshot, the selections and the computed totals.
    """

    user_id: str
    items: Sequence[OrderItem]
    shipping_address: Address
    payment_method: str
    shipping_method: str
    subtotal: float
    shipping_cost: float
    tax: float
    total: float
    discount: float | None = None
    notes: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def requested(self) -> dict[str, int]:
        """Quantity per distinct product, first-seen cart order."""
        totals: dict[str, int] = {}
        for item in self.items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
        return totals

    def as_payload(self) -> dict[str, Any]:
        """Candidate ``Order`` document (camelCase), status and payment pending."""
        payload: dict[str, Any] = {
            "userId": self.user_id,
            "items": [item.model_dump(by_alias=True) for item in self.items],
            "shippingAddress": self.shipping_address.model_dump(by_alias=True),
            "paymentMethod": self.payment_method,
            "paymentStatus": PaymentStatus.PENDING,
            "shippingMethod": self.shipping_method,
            "shippingCost": self.shipping_cost,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "status": OrderStatus.PENDING,
        }
        if self.discount is not None:
            payload["discount"] = self.discount
        if self.notes:
            payload["notes"] = self.notes
        return payload


__all__ = ("OrderDraft",)
