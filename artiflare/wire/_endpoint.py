"""
Endpoints — one Result-returning handler and the ways it is reachable.

    send = endpoint(dispatcher.send).expose(
        HTTPRouteTrigger("POST", "/api/send-order-emails", summary="Send order emails"),
        RequestResponseCodec(OrderEmailRequest, OrderEmailResponse),
    )
    app = Application().mount(send)

``expose`` returns a new endpoint, so a base endpoint can be exposed
differently in several applications.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Self

from kungfu import Result

type Handler = Callable[[Any], Awaitable[Result[Any, Any]]]
type Exposure = tuple[object, object]  # (trigger, codec); compilers pick the pairs they know


@dataclass(frozen=True, slots=True)
class Endpoint:
    handler: Handler
    exposures: tuple[Exposure, ...] = ()

    @property
    def name(self) -> str:
        return getattr(self.handler, "__qualname__", type(self.handler).__name__)

    def expose(self, trigger: object, codec: object) -> Endpoint:
        return Endpoint(self.handler, (*self.exposures, (trigger, codec)))


def endpoint(handler: Handler) -> Endpoint:
    return Endpoint(handler)


class Application:
    """Endpoints collected for one compiler run."""

    def __init__(self, *endps: Endpoint) -> None:
        self.endpoints: list[Endpoint] = list(endps)

    def mount(self, *endps: Endpoint) -> Self:
        self.endpoints.extend(endps)
        return self


__all__ = ("Handler", "Exposure", "Endpoint", "endpoint", "Application")
