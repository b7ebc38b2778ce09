from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

ChangeCallback = Callable[[T], "Awaitable[None] | None"]


async def deliver(callback: Callable[[Any], Any], payload: Any) -> None:
    """Invoke a sync or async change callback."""
    result = callback(payload)
    if inspect.isawaitable(result):
        await result


class Subscription:
    """Handle returned by every ``subscribe()`` call.

    ``unsubscribe()`` runs the teardown hook at most once; later calls are
    no-ops.  Deliveries racing with teardown must check ``active`` first.
    """

    def __init__(self, on_close: Callable[[], Awaitable[None]] | None = None) -> None:
        self._on_close = on_close
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_close is not None:
            await self._on_close()


class EventBus(Generic[T]):
    """Async fan-out of change notifications to subscriber callbacks.

    Producers call ``publish()`` with a fresh payload.  Each subscriber gets
    its own ``Subscription``; a failing callback is logged and never stops
    delivery to the others.
    """

    def __init__(self) -> None:
        self._subscribers: dict[Subscription, ChangeCallback[T]] = {}

    def subscribe(
        self,
        callback: ChangeCallback[T],
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> Subscription:
        subscription: Subscription

        async def _close() -> None:
            self._subscribers.pop(subscription, None)
            if on_close is not None:
                await on_close()

        subscription = Subscription(_close)
        self._subscribers[subscription] = callback
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, payload: T) -> None:
        """Deliver a payload to every active subscriber."""
        for subscription, callback in list(self._subscribers.items()):
            if not subscription.active:
                continue
            try:
                await deliver(callback, payload)
            except Exception:
                log.exception("Subscriber %s failed handling update", callback)
