"""
Order email client — best-effort POST to the mailer service.

    notifier = HttpOrderNotifier("http://localhost:5000/api/send-order-emails")

    match await notifier.send(payload):
        case Ok(None): ...
        case Error(NotificationFailure(message=msg, status=status)): ...

Never raises: transport errors and non-2xx answers both come back as
``NotificationFailure``. Callers downgrade that to a warning.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from kungfu import Error, Ok, Result

from artiflare import lift as L
from artiflare.config import Settings
from artiflare.errors import NotificationFailure
from artiflare.notify._payload import OrderEmailPayload

logger = logging.getLogger(__name__)


class OrderNotifier(Protocol):
    async def send(self, payload: OrderEmailPayload) -> Result[None, NotificationFailure]: ...


class HttpOrderNotifier:
    """
    POSTs the payload as JSON.

    Pass ``client`` to reuse a connection pool (or a mock transport in tests);
    otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.endpoint = endpoint
        self._client = client
        self._timeout = timeout

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> HttpOrderNotifier:
        return cls(
            settings.order_email_endpoint,
            client=client,
            timeout=settings.notify_timeout_seconds,
        )

    async def _post(self, body: dict[str, object]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.endpoint, json=body, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self.endpoint, json=body)

    async def send(self, payload: OrderEmailPayload) -> Result[None, NotificationFailure]:
        body = payload.model_dump(mode="json")
        posted = await L.catching_async(
            lambda: self._post(body),
            on_error=lambda e: NotificationFailure(f"{type(e).__name__}: {e}"),
        )
        match posted:
            case Error(err):
                return Error(err)
            case Ok(response) if response.is_success:
                logger.info("Order emails requested for order %s", payload.order.id)
                return Ok(None)
            case Ok(response):
                return Error(
                    NotificationFailure(
                        "Order email endpoint rejected the request",
                        status=response.status_code,
                    )
                )


__all__ = ("OrderNotifier", "HttpOrderNotifier")
