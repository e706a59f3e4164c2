"""
Mailer HTTP service.

    GET  /                        → "API is running"
    POST /api/send-order-emails   → 200 {"message": "Order emails sent"}
                                    422 malformed body
                                    502 {"message": ...} provider failure

    app = create_app(provider=LogMailProvider())
    uvicorn.run(app, port=5000)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from kungfu import Error, Ok, Result
from pydantic import BaseModel

from artiflare.config import Settings, get_settings
from artiflare.mailer._dispatch import DeliveryFailure, Dispatched, OrderEmailDispatcher
from artiflare.mailer._providers import MailProvider, provider_from_settings
from artiflare.notify import OrderEmailPayload
from artiflare.wire import Application, HTTPRouteTrigger, Reply, RequestResponseCodec, endpoint
from artiflare.wire.contrib import fastapi as wire_fastapi

logger = logging.getLogger(__name__)

SEND_ORDER_EMAILS = "/api/send-order-emails"


class OrderEmailRequest(OrderEmailPayload):
    def to_domain(self) -> OrderEmailPayload:
        return OrderEmailPayload.model_validate(self.model_dump())


class OrderEmailResponse(BaseModel):
    message: str
    sent: list[str] = []
    skipped: list[str] = []

    @classmethod
    def from_domain(cls, dom: Result[Dispatched, DeliveryFailure]) -> Reply:
        match dom:
            case Ok(done):
                return Reply(
                    cls(message="Order emails sent", sent=list(done.sent), skipped=list(done.skipped))
                )
            case Error(err):
                return Reply(cls(message=str(err)), status=502)


def create_app(
    settings: Settings | None = None,
    provider: MailProvider | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    dispatcher = OrderEmailDispatcher(provider or provider_from_settings(settings))

    send = endpoint(dispatcher.send).expose(
        HTTPRouteTrigger("POST", SEND_ORDER_EMAILS, summary="Send order emails", tags=("orders",)),
        RequestResponseCodec(OrderEmailRequest, OrderEmailResponse),
    )
    app = wire_fastapi.from_application(Application().mount(send), title="artiflare mailer")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return "API is running"

    return app


__all__ = ("OrderEmailRequest", "OrderEmailResponse", "create_app", "SEND_ORDER_EMAILS")
