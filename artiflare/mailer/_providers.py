"""
Mail providers — where rendered emails actually go.

    provider = provider_from_settings(get_settings())
    await provider.deliver(email)

``LogMailProvider`` only logs (and keeps the most recent emails for inspection);
``HttpMailProvider`` POSTs to a transactional-mail HTTP API. Providers raise
on failure; the dispatcher turns that into a value.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Protocol

import httpx

from artiflare.config import Settings
from artiflare.mailer._render import Email

logger = logging.getLogger(__name__)


class MailProvider(Protocol):
    async def deliver(self, email: Email) -> None: ...


class LogMailProvider:
    """Logs each email and keeps the last ``keep`` of them in ``sent``."""

    def __init__(self, keep: int = 100) -> None:
        self.sent: deque[Email] = deque(maxlen=keep)

    async def deliver(self, email: Email) -> None:
        logger.info("Mail to %s: %s (%d bytes)", email.to, email.subject, len(email.html))
        self.sent.append(email)


class HttpMailProvider:
    """
    JSON API provider: ``{"from", "to", "subject", "html"}`` with a bearer key.

    Non-2xx answers raise ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        api_url: str,
        sender: str,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_url = api_url
        self.sender = sender
        self._api_key = api_key
        self._client = client
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        if self._api_key is None:
            return {}
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _post(self, client: httpx.AsyncClient, email: Email) -> None:
        response = await client.post(
            self.api_url,
            json={"from": self.sender, "to": email.to, "subject": email.subject, "html": email.html},
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()

    async def deliver(self, email: Email) -> None:
        if self._client is not None:
            await self._post(self._client, email)
            return
        async with httpx.AsyncClient() as client:
            await self._post(client, email)


def provider_from_settings(settings: Settings) -> MailProvider:
    if settings.mail_provider == "http":
        if not settings.mail_api_url:
            raise ValueError("ARTIFLARE_MAIL_API_URL is required for the http mail provider")
        return HttpMailProvider(
            settings.mail_api_url,
            sender=settings.mail_from,
            api_key=settings.mail_api_key,
        )
    return LogMailProvider()


__all__ = (
    "MailProvider",
    "LogMailProvider",
    "HttpMailProvider",
    "provider_from_settings",
)
