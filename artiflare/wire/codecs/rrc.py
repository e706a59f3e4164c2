"""
Request/response codec.

The request model turns itself into the handler argument; the response model
turns the handler's ``Result`` into a ``Reply``. A response model that returns
a bare body is sent with status 200.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from kungfu import Result


class ToDomain[T](Protocol):
    def to_domain(self) -> T: ...


class FromDomain(Protocol):
    @classmethod
    def from_domain(cls, dom: Result[Any, Any]) -> Any: ...


@dataclass(frozen=True, slots=True)
class Reply:
    """A response body plus the HTTP status it is sent with."""

    body: Any
    status: int = 200


@dataclass(frozen=True, slots=True)
class RequestResponseCodec:
    request: type[ToDomain[Any]]
    response: type[FromDomain]

    def decode(self, payload: ToDomain[Any]) -> Any:
        return payload.to_domain()

    def encode(self, result: Result[Any, Any]) -> Reply:
        reply = self.response.from_domain(result)
        return reply if isinstance(reply, Reply) else Reply(reply)


__all__ = ("ToDomain", "FromDomain", "Reply", "RequestResponseCodec")
