from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from core.event_bus import Subscription
from models.status import ServiceState

log = logging.getLogger(__name__)

T = TypeVar("T")


class StatusSource(ABC, Generic[T]):
    """Abstract base for the data sources the dashboard can be wired to.

    Each concrete source fetches its own backend (polled JSON API, realtime
    row store) and delivers complete snapshots of type ``T``.  The
    presentation layer only talks to this interface, so the page does not
    care which backend is configured.

    Implementations must never raise network failures into the caller:
    they convert them to typed error state or a safe empty/False default.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name (e.g. 'polling')."""

    @abstractmethod
    async def fetch_snapshot(self) -> T:
        """Read the current snapshot once."""

    @abstractmethod
    async def subscribe(
        self, on_change: Callable[[T], Awaitable[None] | Any]
    ) -> Subscription:
        """Deliver a fresh snapshot to ``on_change`` whenever data changes.

        The returned subscription tears everything down on ``unsubscribe()``;
        calling it twice is safe.
        """

    async def mutate(self, service_id: str, state: ServiceState) -> bool:
        """Persist a new state for one service.

        Read-only sources keep this default and report failure.
        """
        log.warning("[%s] Source is read-only; cannot update %s", self.name, service_id)
        return False

    async def close(self) -> None:
        """Release background resources.  Override when there are any."""
