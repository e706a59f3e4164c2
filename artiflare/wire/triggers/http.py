"""HTTP route trigger. ``summary`` and ``tags`` end up in the OpenAPI schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

type Method = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


@dataclass(frozen=True, slots=True)
class HTTPRouteTrigger:
    method: Method
    path: str
    summary: str | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {self.path!r}")


__all__ = ("HTTPRouteTrigger", "Method")
