"""
Order email dispatch — render both emails and hand them to the provider.

A recipient without an email address (phone-only account) is skipped with a
warning. The first provider failure stops the dispatch and comes back as
``DeliveryFailure``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from artiflare import lift as L
from artiflare.mailer._providers import MailProvider
from artiflare.mailer._render import Email, render_order_emails
from artiflare.notify import OrderEmailPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeliveryFailure:
    recipient: str
    message: str

    def __str__(self) -> str:
        return f"Failed to send email to {self.recipient}: {self.message}"


@dataclass(frozen=True, slots=True)
class Dispatched:
    order_id: str
    sent: tuple[str, ...]
    skipped: tuple[str, ...]


class OrderEmailDispatcher:
    def __init__(self, provider: MailProvider) -> None:
        self.provider = provider

    async def _deliver(self, email: Email) -> Result[None, DeliveryFailure]:
        return await L.catching_async(
            lambda: self.provider.deliver(email),
            on_error=lambda e: DeliveryFailure(email.to, f"{type(e).__name__}: {e}"),
        )

    async def send(self, payload: OrderEmailPayload) -> Result[Dispatched, DeliveryFailure]:
        sent: list[str] = []
        skipped: list[str] = []
        for role, email in zip(("customer", "artisan"), render_order_emails(payload)):
            if not email.to:
                logger.warning("Order %s: %s has no email address, skipping", payload.order.id, role)
                skipped.append(role)
                continue
            match await self._deliver(email):
                case Error(err):
                    logger.error("Order %s: %s", payload.order.id, err)
                    return Error(err)
                case Ok(_):
                    sent.append(role)

        logger.info("Order %s: emails sent to %s", payload.order.id, ", ".join(sent) or "nobody")
        return Ok(Dispatched(payload.order.id, tuple(sent), tuple(skipped)))


__all__ = ("DeliveryFailure", "Dispatched", "OrderEmailDispatcher")
