from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from core.errors import FetchError
from core.resource import ResourceState

log = logging.getLogger(__name__)

T = TypeVar("T")


class Poller(Generic[T]):
    """Fixed-interval refresher for one remote resource.

    Each cycle:
    1. dispatch a fetch tagged with a new sequence number
    2. apply the result unless a later-dispatched one was applied already
    3. notify the change listener
    4. sleep for the poll interval

    ``stop()`` cancels only the sleeping loop.  A fetch that is already in
    flight is shielded and still updates ``state`` when it lands.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        interval_seconds: float,
        on_change: Callable[[ResourceState[T]], Awaitable[None]] | None = None,
    ) -> None:
        self.name = name
        self._fetch = fetch
        self._interval = interval_seconds
        self._on_change = on_change
        self._state: ResourceState[T] = ResourceState()
        self._dispatched = 0
        self._applied = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ResourceState[T]:
        return self._state

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> ResourceState[T]:
        """Fetch once now and return the resulting state."""
        self._dispatched += 1
        seq = self._dispatched

        error: FetchError | None = None
        data: T | None = None
        try:
            data = await self._fetch()
        except FetchError as exc:
            error = exc

        if seq < self._applied:
            log.debug("[%s] Discarding out-of-order response #%d", self.name, seq)
            return self._state
        self._applied = seq

        if error is not None:
            log.warning("[%s] Refresh failed: %s", self.name, error)
            self._state = self._state.failed(error)
        else:
            self._state = self._state.succeeded(data)

        if self._on_change is not None and self.running:
            await self._on_change(self._state)
        return self._state

    async def _run_loop(self) -> None:
        log.info("Poller started for %s (interval=%ss)", self.name, self._interval)
        try:
            while True:
                await asyncio.shield(self.refresh())
                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            log.info("Poller stopped for %s", self.name)
            raise

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop(), name=f"poller-{self.name}")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        if task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
