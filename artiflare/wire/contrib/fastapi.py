"""
FastAPI compiler for wire applications.

    from artiflare.wire.contrib import fastapi as wire_fastapi

    fapp = wire_fastapi.from_application(app, title="artiflare mailer")

Each HTTP exposure becomes one route. The request model is the route's body
(or query, for ``GET``); the handler's ``Result`` goes through the codec and
the resulting ``Reply`` is sent as JSON with its status. Exposures with other
triggers or codecs are skipped.
"""

from typing import Annotated, Any, TypeGuard

import fastapi
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from artiflare.wire._endpoint import Application, Endpoint, Exposure, Handler
from artiflare.wire.codecs.rrc import Reply, RequestResponseCodec
from artiflare.wire.triggers.http import HTTPRouteTrigger

type Route = tuple[HTTPRouteTrigger, Any]  # (trigger, route function)


def is_http(exposure: Exposure) -> TypeGuard[tuple[HTTPRouteTrigger, RequestResponseCodec]]:
    trigger, codec = exposure
    return isinstance(trigger, HTTPRouteTrigger) and isinstance(codec, RequestResponseCodec)


def render(reply: Reply) -> JSONResponse:
    return JSONResponse(status_code=reply.status, content=jsonable_encoder(reply.body))


def route_function(trigger: HTTPRouteTrigger, codec: RequestResponseCodec, handler: Handler) -> Any:
    async def _route(req: Any) -> JSONResponse:
        return render(codec.encode(await handler(codec.decode(req))))

    req_cls: Any = codec.request
    if trigger.method == "GET":
        req_cls = Annotated[req_cls, fastapi.Query()]

    # FastAPI reads the parameter type from here to build the body/query model
    _route.__annotations__ = {"req": req_cls, "return": JSONResponse}
    return _route


def compile_to_fastapi_route(endp: Endpoint) -> list[Route]:
    return [
        (trigger, route_function(trigger, codec, endp.handler))
        for trigger, codec in filter(is_http, endp.exposures)
    ]


def add_endpoint_to_app(app: fastapi.FastAPI, endp: Endpoint) -> None:
    for trigger, route in compile_to_fastapi_route(endp):
        app.add_api_route(
            trigger.path,
            route,
            methods=[trigger.method],
            summary=trigger.summary,
            tags=list(trigger.tags) or None,
            name=endp.name,
        )


def from_application(app: Application, **kwargs: Any) -> fastapi.FastAPI:
    """``kwargs`` go to the ``FastAPI`` constructor."""
    f_app = fastapi.FastAPI(**kwargs)
    for endp in app.endpoints:
        add_endpoint_to_app(f_app, endp)
    return f_app


__all__ = (
    "Route",
    "is_http",
    "render",
    "route_function",
    "compile_to_fastapi_route",
    "add_endpoint_to_app",
    "from_application",
)
