"""
Order placer — ``place_order`` with bounded retry for transient aborts.

    placer = OrderPlacer(store, order_retry_policy(times=3))
    result = await placer.place(draft)

Retry is ``combinators.retry`` with an exponential (optionally jittered)
policy. Only ``TransactionAborted`` is retried. Business-rule failures
(``ProductNotFound``, ``InsufficientInventory``) and validation errors return
on the first attempt. An exception escaping the store becomes ``Unknown``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace

from combinators import RetryPolicy, retry
from kungfu import Error, LazyCoroResult, Result

from artiflare import lift as L
from artiflare.config import Settings
from artiflare.errors import OrderError, TransactionAborted
from artiflare.orders._place import place_order
from artiflare.orders._types import OrderDraft
from artiflare.store import DocumentStore

logger = logging.getLogger(__name__)


def transient(err: object) -> bool:
    return isinstance(err, TransactionAborted)


def order_retry_policy(
    times: int = 3,
    initial: float = 0.05,
    max_delay: float = 1.0,
    jitter: bool = True,
) -> RetryPolicy[OrderError]:
    """Exponential backoff (doubling, capped at ``max_delay``) retrying aborts only."""
    max_delay = max(max_delay, initial)
    if jitter:
        return RetryPolicy.exponential_jitter(
            times, initial=initial, max_delay=max_delay, retry_on=transient
        )
    return RetryPolicy.exponential(times, initial=initial, max_delay=max_delay, retry_on=transient)


def retry_policy_from_settings(settings: Settings) -> RetryPolicy[OrderError]:
    return order_retry_policy(
        times=settings.order_retry_attempts,
        initial=settings.order_retry_backoff_initial,
        max_delay=settings.order_retry_backoff_max,
        jitter=settings.order_retry_jitter,
    )


type PlaceFn = Callable[[DocumentStore, OrderDraft], Awaitable[Result[str, OrderError]]]


class OrderPlacer:
    def __init__(
        self,
        store: DocumentStore,
        policy: RetryPolicy[OrderError] | None = None,
        place: PlaceFn = place_order,
    ) -> None:
        self.store = store
        self.policy = policy or order_retry_policy()
        self._place = place

    def _attempt(self, draft: OrderDraft) -> LazyCoroResult[str, OrderError]:
        async def run() -> Result[str, OrderError]:
            result = await L.guarded(lambda: self._place(self.store, draft))
            match result:
                case Error(TransactionAborted() as err):
                    logger.warning("Order placement for %s aborted: %s", draft.user_id, err)
            return result

        return LazyCoroResult(run)

    def _gave_up(self, err: OrderError) -> OrderError:
        # An abort surviving the retry means every attempt was spent.
        if isinstance(err, TransactionAborted):
            logger.error("Order placement gave up after %d attempts", self.policy.times)
            return replace(err, attempts=self.policy.times)
        return err

    async def place(self, draft: OrderDraft) -> Result[str, OrderError]:
        return await retry(self._attempt(draft), policy=self.policy).map_err(self._gave_up)


__all__ = (
    "RetryPolicy",
    "OrderPlacer",
    "order_retry_policy",
    "retry_policy_from_settings",
    "transient",
)
