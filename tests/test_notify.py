from __future__ import annotations

import json

import httpx

from artiflare.errors import NotificationFailure
from artiflare.notify import HttpOrderNotifier
from tests.factories import email_payload, error_of, value_of

ENDPOINT = "http://mailer.test/api/send-order-emails"


async def test_posts_payload_as_json() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"message": "Order emails sent"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        value_of(await HttpOrderNotifier(ENDPOINT, client=client).send(email_payload()))

    [request] = seen
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    body = json.loads(request.content)
    assert body["order"]["id"] == "TEST123"
    assert body["order"]["products"][0]["quantity"] == 2


async def test_non_2xx_is_a_failure_value() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(502, json={"message": "down"}))
    async with httpx.AsyncClient(transport=transport) as client:
        err = error_of(await HttpOrderNotifier(ENDPOINT, client=client).send(email_payload()))
    assert err == NotificationFailure("Order email endpoint rejected the request", status=502)


async def test_transport_error_is_a_failure_value() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        err = error_of(await HttpOrderNotifier(ENDPOINT, client=client).send(email_payload()))
    assert err.status is None
    assert "ConnectError" in err.message
