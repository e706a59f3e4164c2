from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from artiflare.gateway import (
    OrderGateway,
    ProductGateway,
    ReviewGateway,
    UserGateway,
    WishlistGateway,
)
from artiflare.orders import OrderPlacer, order_retry_policy
from artiflare.store import MemoryDocumentStore, SQLAlchemyDocumentStore
from tests.factories import ARTISAN, CUSTOMER, address_data, product_data


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
async def sql_store(tmp_path) -> AsyncIterator[SQLAlchemyDocumentStore]:
    sql = SQLAlchemyDocumentStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await sql.create_tables()
    yield sql
    await sql.dispose()


@pytest.fixture(params=["memory", "sql"])
async def any_store(request, tmp_path) -> AsyncIterator[Any]:
    if request.param == "memory":
        yield MemoryDocumentStore()
        return
    sql = SQLAlchemyDocumentStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'any.db'}")
    await sql.create_tables()
    yield sql
    await sql.dispose()


@pytest.fixture
def users(store: MemoryDocumentStore) -> UserGateway:
    return UserGateway(store)


@pytest.fixture
def products(store: MemoryDocumentStore) -> ProductGateway:
    return ProductGateway(store)


@pytest.fixture
def orders(store: MemoryDocumentStore) -> OrderGateway:
    return OrderGateway(store)


@pytest.fixture
def reviews(store: MemoryDocumentStore, products: ProductGateway) -> ReviewGateway:
    return ReviewGateway(store, products)


@pytest.fixture
def wishlists(store: MemoryDocumentStore) -> WishlistGateway:
    return WishlistGateway(store)


@pytest.fixture
def placer(store: MemoryDocumentStore) -> OrderPlacer:
    return OrderPlacer(store, order_retry_policy(times=5, initial=0.0, jitter=False))


@pytest.fixture
async def seeded(store: MemoryDocumentStore, products: ProductGateway, users: UserGateway) -> dict[str, str]:
    """Artisan + customer (one default address) + three products."""
    await users.create(
        {
            "uid": ARTISAN,
            "displayName": "Meera",
            "email": "meera@example.com",
            "role": "artisan",
            "companyName": "Meera's Pottery",
        }
    )
    await users.create(
        {
            "uid": CUSTOMER,
            "displayName": "Arjun",
            "email": "arjun@example.com",
            "addresses": [address_data()],
        }
    )
    await products.create(product_data(), doc_id="mug")
    await products.create(product_data(name="Glazed Vase", price=60.0, inventory=1), doc_id="vase")
    await products.create(product_data(name="Serving Bowl", price=40.0, inventory=0), doc_id="bowl")
    return {"mug": "mug", "vase": "vase", "bowl": "bowl"}
