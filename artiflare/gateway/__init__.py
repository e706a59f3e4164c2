"""
Gateway — typed per-entity access to the document store.

    from artiflare import gateway as G

    users = G.UserGateway(store)
    got = await users.get(uid)
    if got.entity is None:
        ...                       # got.error: NotFound

Reads never raise for a missing document; writes return ``Result``.
"""

from artiflare.gateway._base import (
    DEFAULT_PAGE_SIZE,
    Collection,
    FilterSpec,
    GetResult,
    ListPage,
    as_filter,
)
from artiflare.gateway.users import AuthIdentity, UserGateway
from artiflare.gateway.products import ProductGateway
from artiflare.gateway.orders import ARTISAN_IDS_FIELD, OrderGateway
from artiflare.gateway.reviews import ReviewGateway
from artiflare.gateway.wishlists import WishlistGateway

__all__ = (
    # Base
    "Collection",
    "GetResult",
    "ListPage",
    "FilterSpec",
    "as_filter",
    "DEFAULT_PAGE_SIZE",
    # Entities
    "AuthIdentity",
    "UserGateway",
    "ProductGateway",
    "OrderGateway",
    "ARTISAN_IDS_FIELD",
    "ReviewGateway",
    "WishlistGateway",
)
