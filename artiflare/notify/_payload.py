"""
Order email payload — the body of ``POST /api/send-order-emails``.

    {
      "customer": {"email": ..., "name": ...},
      "artisan":  {"email": ..., "name": ...},
      "order": {
        "id": ...,
        "products": [{"name": ..., "image": ..., "price": ..., "quantity": ...}],
        "total": ...,
        "date": ...
      }
    }

Shared by the checkout client (which builds it) and the mailer service
(which validates it).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Party(_Body):
    """A recipient. ``email`` may be empty (phone-only accounts)."""

    email: str = ""
    name: str = Field(min_length=1)


class ProductLine(_Body):
    name: str
    image: str = ""
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


class OrderSummary(_Body):
    id: str = Field(min_length=1)
    products: list[ProductLine] = Field(min_length=1)
    total: float = Field(ge=0)
    date: str


class OrderEmailPayload(_Body):
    customer: Party
    artisan: Party
    order: OrderSummary


__all__ = ("Party", "ProductLine", "OrderSummary", "OrderEmailPayload")
