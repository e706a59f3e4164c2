"""
artiflare — order placement core for a handcrafted-goods marketplace.

    from artiflare import store as St     # Document engines, transactions
    from artiflare import gateway as G    # Typed per-entity access
    from artiflare import orders as O     # Atomic order placement
    from artiflare import checkout as C   # Cart → placed order
"""

from artiflare import store
from artiflare import schemas
from artiflare import gateway
from artiflare import orders
from artiflare import notify
from artiflare import checkout
from artiflare import lift
from artiflare import errors
from artiflare.inventory import InventoryLedger
from artiflare.app import Marketplace
from artiflare._types import (
    Lazy,
    DocumentData,
    DocumentId,
)

__version__ = "0.1.0"

__all__ = (
    "store",
    "schemas",
    "gateway",
    "orders",
    "notify",
    "checkout",
    "lift",
    "errors",
    "InventoryLedger",
    "Marketplace",
    "Lazy",
    "DocumentData",
    "DocumentId",
)
