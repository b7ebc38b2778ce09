from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from core.errors import DecodeError, FetchError
from core.event_bus import EventBus, Subscription
from core.poller import Poller
from core.resource import ResourceState
from core.settings import DEFAULT_PLATFORM_STATS_API, DEFAULT_STATUS_API
from models.status import PlatformStats, StatusSnapshot
from providers.base import StatusSource

log = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_POLL_INTERVAL = 60
STATS_POLL_INTERVAL = 30


@dataclass(frozen=True)
class PollingView:
    """What the polling source delivers: both resources, independently."""

    status: ResourceState[StatusSnapshot]
    stats: ResourceState[PlatformStats]


class PollingStatusClient(StatusSource[PollingView]):
    """Source adapter for the JSON status and platform-stats endpoints.

    A shared ``httpx.AsyncClient`` is injected at construction time.  The
    two endpoints are refreshed by independent pollers that only run while
    at least one subscriber is attached.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        status_url: str = DEFAULT_STATUS_API,
        stats_url: str = DEFAULT_PLATFORM_STATS_API,
        status_interval: float = STATUS_POLL_INTERVAL,
        stats_interval: float = STATS_POLL_INTERVAL,
    ) -> None:
        self._client = client
        self.status_url = status_url
        self.stats_url = stats_url
        self._bus: EventBus[PollingView] = EventBus()
        self._status = Poller(
            "status",
            lambda: self._fetch_json(status_url, StatusSnapshot.from_json),
            status_interval,
            on_change=self._publish,
        )
        self._stats = Poller(
            "stats",
            lambda: self._fetch_json(stats_url, PlatformStats.from_json),
            stats_interval,
            on_change=self._publish,
        )

    @property
    def name(self) -> str:
        return "polling"

    @property
    def view(self) -> PollingView:
        return PollingView(status=self._status.state, stats=self._stats.state)

    async def _fetch_json(self, url: str, decode: Callable[[Any], T]) -> T:
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as exc:
            log.error("[%s] HTTP error for %s: %s", self.name, url, exc)
            raise FetchError(url) from exc

        if not resp.is_success:
            log.warning("[%s] Unexpected status %d from %s", self.name, resp.status_code, url)
            raise FetchError(url)

        try:
            return decode(resp.json())
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            log.error("[%s] Malformed payload from %s: %s", self.name, url, exc)
            raise DecodeError(url) from exc

    async def _publish(self, _state: ResourceState[Any]) -> None:
        await self._bus.publish(self.view)

    async def refresh(self) -> PollingView:
        """Refresh both endpoints now, regardless of the poll schedule."""
        await asyncio.gather(self._status.refresh(), self._stats.refresh())
        return self.view

    async def fetch_snapshot(self) -> PollingView:
        return await self.refresh()

    async def subscribe(
        self, on_change: Callable[[PollingView], Awaitable[None] | Any]
    ) -> Subscription:
        subscription = self._bus.subscribe(on_change, on_close=self._maybe_stop)
        self._status.start()
        self._stats.start()
        return subscription

    async def _maybe_stop(self) -> None:
        if self._bus.subscriber_count == 0:
            log.info("[%s] Last subscriber detached, stopping pollers", self.name)
            await self.close()

    async def close(self) -> None:
        await asyncio.gather(self._status.stop(), self._stats.stop())
