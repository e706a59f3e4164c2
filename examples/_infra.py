"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine

from kungfu import Error, Ok, Result

from artiflare import Marketplace
from artiflare.errors import NotificationFailure
from artiflare.notify import OrderEmailPayload
from artiflare.schemas import Role

ARTISAN_ID = "artisan-meera"
CUSTOMER_ID = "customer-arjun"


# Notifier that prints instead of calling the mailer
class PrintNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    async def send(self, payload: OrderEmailPayload) -> Result[None, NotificationFailure]:
        if self.fail:
            print(f"  ✗ email for order {payload.order.id}: mailer unreachable")
            return Error(NotificationFailure("mailer unreachable"))
        print(f"  ✉ email for order {payload.order.id} → {payload.customer.name}, {payload.artisan.name}")
        return Ok(None)


# Seed data
async def seed(market: Marketplace) -> dict[str, str]:
    """Create one artisan, one customer with an address, and a few products."""
    await market.users.create(
        {
            "uid": ARTISAN_ID,
            "displayName": "Meera",
            "email": "meera@example.com",
            "role": Role.ARTISAN,
            "companyName": "Meera's Pottery",
        }
    )
    await market.users.create(
        {
            "uid": CUSTOMER_ID,
            "displayName": "Arjun",
            "email": "arjun@example.com",
            "addresses": [
                {
                    "id": "home",
                    "street": "12 MG Road",
                    "city": "Pune",
                    "state": "MH",
                    "zipCode": "411001",
                    "country": "India",
                    "isDefault": True,
                }
            ],
        }
    )

    ids: dict[str, str] = {}
    for key, name, price, stock in (
        ("mug", "Clay Mug", 25.0, 5),
        ("vase", "Glazed Vase", 60.0, 1),
        ("bowl", "Serving Bowl", 40.0, 0),
    ):
        created = await market.products.create(
            {
                "name": name,
                "description": f"Handmade {name.lower()}",
                "price": price,
                "images": [f"https://example.com/{key}.jpg"],
                "category": "pottery",
                "artisanId": ARTISAN_ID,
                "inventory": stock,
            },
            doc_id=key,
        )
        match created:
            case Ok(product):
                ids[key] = product.id or key
            case Error(e):
                raise RuntimeError(f"seeding {key} failed: {e}")
    return ids


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
