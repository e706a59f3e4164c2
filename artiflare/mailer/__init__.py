"""
Mailer — the service behind ``POST /api/send-order-emails``.

    from artiflare.mailer import create_app, LogMailProvider

    app = create_app(provider=LogMailProvider())

Run it with ``python -m artiflare.mailer`` (settings from ``ARTIFLARE_*``).
"""

from artiflare.mailer._render import (
    Email,
    format_amount,
    render_artisan_notification,
    render_customer_invoice,
    render_order_emails,
)
from artiflare.mailer._providers import (
    HttpMailProvider,
    LogMailProvider,
    MailProvider,
    provider_from_settings,
)
from artiflare.mailer._dispatch import DeliveryFailure, Dispatched, OrderEmailDispatcher
from artiflare.mailer._api import (
    SEND_ORDER_EMAILS,
    OrderEmailRequest,
    OrderEmailResponse,
    create_app,
)

__all__ = (
    "Email",
    "format_amount",
    "render_customer_invoice",
    "render_artisan_notification",
    "render_order_emails",
    "MailProvider",
    "LogMailProvider",
    "HttpMailProvider",
    "provider_from_settings",
    "DeliveryFailure",
    "Dispatched",
    "OrderEmailDispatcher",
    "SEND_ORDER_EMAILS",
    "OrderEmailRequest",
    "OrderEmailResponse",
    "create_app",
)
