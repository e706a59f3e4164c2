"""
Lift — turning coroutines that may raise into Results.

    from artiflare import lift as L

    sent = await L.catching_async(
        lambda: client.post(url, json=payload),
        on_error=lambda e: NotificationFailure(str(e)),
    )

    placed = await L.guarded(lambda: place_order(store, draft))
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from combinators.lift import catching_async
from kungfu import Error, LazyCoroResult, Ok, Result

from artiflare._types import Lazy
from artiflare.errors import Unknown


def unknown(exc: Exception) -> Unknown:
    return Unknown(f"{type(exc).__name__}: {exc}")


def guarded[T, E](
    fn: Callable[[], Awaitable[Result[T, E]]],
) -> Lazy[T, E | Unknown]:
    """
    Run a Result-returning coroutine; an exception escaping it becomes ``Unknown``.

    Typed failures pass through untouched.
    """

    async def _run() -> Result[T, E | Unknown]:
        match await catching_async(fn, on_error=unknown):
            case Ok(inner):
                return inner
            case Error(err):
                return Error(err)

    return LazyCoroResult(_run)


__all__ = ("catching_async", "guarded", "unknown")
