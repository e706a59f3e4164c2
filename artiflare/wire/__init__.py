"""
Wire — expose Result-returning handlers over HTTP.

    from artiflare.wire import Application, HTTPRouteTrigger, RequestResponseCodec, endpoint
    from artiflare.wire.contrib import fastapi as wire_fastapi

    send = endpoint(dispatcher.send).expose(
        HTTPRouteTrigger("POST", "/api/send-order-emails"),
        RequestResponseCodec(OrderEmailRequest, OrderEmailResponse),
    )
    app = wire_fastapi.from_application(Application().mount(send), title="mailer")
"""

from artiflare.wire._endpoint import Application, Endpoint, Exposure, Handler, endpoint
from artiflare.wire.codecs.rrc import Reply, RequestResponseCodec
from artiflare.wire.triggers.http import HTTPRouteTrigger, Method

from artiflare.wire import codecs, contrib, triggers

__all__ = (
    # Core
    "Endpoint",
    "endpoint",
    "Application",
    "Handler",
    "Exposure",
    # Built-ins
    "Reply",
    "RequestResponseCodec",
    "HTTPRouteTrigger",
    "Method",
    # Subpackages
    "codecs",
    "triggers",
    "contrib",
)
