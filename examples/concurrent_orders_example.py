"""
Concurrent orders — two customers race for the last vase.

Exactly one order commits; the other gets InsufficientInventory, and stock
never goes negative.
"""

import asyncio

from kungfu import Error, Ok

from artiflare import Marketplace
from artiflare.errors import InsufficientInventory
from artiflare.orders import OrderDraft
from artiflare.schemas import Address, OrderItem
from examples._infra import CUSTOMER_ID, banner, run, seed

ADDRESS = Address(
    id="home", street="12 MG Road", city="Pune", state="MH", zip_code="411001", country="India"
)


def draft_for(user_id: str) -> OrderDraft:
    item = OrderItem(
        product_id="vase",
        product_name="Glazed Vase",
        quantity=1,
        price=60.0,
        total_price=60.0,
        currency="INR",
        artisan_id="artisan-meera",
    )
    return OrderDraft(
        user_id=user_id,
        items=[item],
        shipping_address=ADDRESS,
        payment_method="cod",
        shipping_method="standard",
        subtotal=60.0,
        shipping_cost=5.99,
        tax=4.8,
        total=70.79,
    )


async def main() -> None:
    market = Marketplace.in_memory()
    await seed(market)

    banner("Race: two buyers, one vase")
    results = await asyncio.gather(
        market.placer.place(draft_for(CUSTOMER_ID)),
        market.placer.place(draft_for("customer-priya")),
    )
    for result in results:
        match result:
            case Ok(order_id):
                print(f"  ✓ placed {order_id}")
            case Error(InsufficientInventory(available=n)):
                print(f"  ✗ out of stock (available {n})")
            case Error(e):
                print(f"  ✗ {e}")

    vase = (await market.products.get("vase")).entity
    print(f"\n  vase inventory: {vase.inventory if vase else '?'}")


if __name__ == "__main__":
    run(main)
