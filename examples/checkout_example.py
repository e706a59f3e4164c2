"""
Checkout — cart to placed order, an out-of-stock rejection, and an order
whose confirmation email fails.

Level 3: artiflare.checkout
Level 2: artiflare.orders
Level 1: kungfu.Result
"""

from kungfu import Error, Ok

from artiflare import Marketplace
from artiflare.checkout import CartItem
from examples._infra import CUSTOMER_ID, PrintNotifier, banner, run, seed


async def main() -> None:
    market = Marketplace.in_memory(notifier=PrintNotifier())
    await seed(market)

    banner("Checkout: happy path")
    cart = [CartItem("mug", "Clay Mug", 25.0, 2, artisan_id="artisan-meera")]
    match await market.open_checkout(CUSTOMER_ID, cart):
        case Error(e):
            print(f"✗ {e}")
            return
        case Ok(session):
            pass

    costs = session.costs
    print(f"  subtotal {costs.subtotal}  shipping {costs.shipping}  tax {costs.tax}  total {costs.total}")

    match await session.place_order():
        case Ok(placed):
            print(f"\n✓ Order {placed.order_id} placed, state={session.state}")
        case Error(e):
            print(f"\n✗ {session.last_error}")

    mug = (await market.products.get("mug")).entity
    print(f"  mug inventory now {mug.inventory if mug else '?'}")

    banner("Checkout: out of stock")
    cart = [CartItem("vase", "Glazed Vase", 60.0, 3, artisan_id="artisan-meera")]
    match await market.open_checkout(CUSTOMER_ID, cart):
        case Ok(session):
            result = await session.place_order()
            print(f"  ok={isinstance(result, Ok)} message={session.last_error!r}")
            print(f"  cart kept: {len(session.cart)} line(s), state={session.state}")
        case Error(e):
            print(f"✗ {e}")

    banner("Checkout: mailer down")
    market.notifier = PrintNotifier(fail=True)
    cart = [CartItem("mug", "Clay Mug", 25.0, 1, artisan_id="artisan-meera")]
    match await market.open_checkout(CUSTOMER_ID, cart):
        case Ok(session):
            match await session.place_order():
                case Ok(placed):
                    print(f"  ✓ Order {placed.order_id} placed, warning={placed.warning!r}")
                case Error(e):
                    print(f"  ✗ {session.last_error}")
        case Error(e):
            print(f"✗ {e}")


if __name__ == "__main__":
    run(main)
