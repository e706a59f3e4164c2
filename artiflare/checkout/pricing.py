"""
Checkout pricing — shipping policies, tax, totals.

    costs = compute_costs(subtotal=200.0, shipping=ThresholdShipping())
    costs.shipping, costs.tax, costs.total     # 0.0, 16.0, 216.0

Money is rounded to two decimals at every step that is shown or stored.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from artiflare.config import Settings

DEFAULT_TAX_RATE = 0.08


def money(value: float) -> float:
    return round(value, 2)


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping policies
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingPolicy(Protocol):
    def cost(self, subtotal: float, delivery_option: str) -> float: ...


@dataclass(frozen=True, slots=True)
class ThresholdShipping:
    """
    Step function of the subtotal.

    ``tiers`` are ``(minimum subtotal, cost)`` pairs; the highest minimum the
    subtotal reaches wins, otherwise ``base`` applies.
    """

    tiers: Sequence[tuple[float, float]] = ((100.0, 0.0), (50.0, 5.99))
    base: float = 9.99

    def cost(self, subtotal: float, delivery_option: str = "standard") -> float:
        for minimum, price in sorted(self.tiers, reverse=True):
            if subtotal >= minimum:
                return price
        return self.base


@dataclass(frozen=True, slots=True)
class FlatTierShipping:
    """Fixed price per delivery option; unknown options fall back to ``default``."""

    prices: Mapping[str, float] = field(
        default_factory=lambda: {"standard": 5.99, "express": 12.99, "sos": 24.99}
    )
    default: str = "standard"

    def cost(self, subtotal: float, delivery_option: str = "standard") -> float:
        return self.prices.get(delivery_option, self.prices[self.default])


def shipping_policy(settings: Settings) -> ShippingPolicy:
    if settings.shipping_policy == "flat":
        return FlatTierShipping()
    return ThresholdShipping()


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CostBreakdown:
    subtotal: float
    shipping: float
    tax: float
    discount: float = 0.0

    @property
    def total(self) -> float:
        return money(self.subtotal + self.shipping + self.tax - self.discount)


def compute_costs(
    subtotal: float,
    shipping: ShippingPolicy,
    delivery_option: str = "standard",
    tax_rate: float = DEFAULT_TAX_RATE,
    discount: float = 0.0,
) -> CostBreakdown:
    """``total = subtotal + shipping + subtotal × tax_rate - discount``."""
    return CostBreakdown(
        subtotal=money(subtotal),
        shipping=money(shipping.cost(subtotal, delivery_option)),
        tax=money(subtotal * tax_rate),
        discount=money(discount),
    )


__all__ = (
    "DEFAULT_TAX_RATE",
    "money",
    "ShippingPolicy",
    "ThresholdShipping",
    "FlatTierShipping",
    "shipping_policy",
    "CostBreakdown",
    "compute_costs",
)
