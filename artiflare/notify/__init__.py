"""
Notify — the order-confirmation email request sent after a committed order.

    from artiflare import notify as N

    notifier = N.HttpOrderNotifier(settings.order_email_endpoint)
    await notifier.send(N.OrderEmailPayload(...))
"""

from artiflare.notify._payload import OrderEmailPayload, OrderSummary, Party, ProductLine
from artiflare.notify._client import HttpOrderNotifier, OrderNotifier

__all__ = (
    "Party",
    "ProductLine",
    "OrderSummary",
    "OrderEmailPayload",
    "OrderNotifier",
    "HttpOrderNotifier",
)
