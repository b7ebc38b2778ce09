from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from core.event_bus import Subscription, deliver
from core.settings import Settings
from models.status import ServiceState, ServiceStatus
from providers.base import StatusSource

log = logging.getLogger(__name__)

DEFAULT_TABLE = "statuses"
CHANNEL_PREFIX = "realtime-status"

_BACKEND_ERRORS = (APIError, httpx.HTTPError)


class BackendMode(str, Enum):
    """Whether the live source has a backend to talk to.

    UNCONFIGURED is a recognised degraded mode, not an error: reads return
    nothing, writes report failure, subscriptions stay silent.
    """

    CONFIGURED = "configured"
    UNCONFIGURED = "unconfigured"


class LiveStatusClient(StatusSource[list[ServiceStatus]]):
    """Source adapter mirroring a Supabase table of service statuses.

    The Supabase ``AsyncClient`` is passed in explicitly; ``None`` puts the
    source in UNCONFIGURED mode.  Every change notification on the table
    triggers a full re-read, since notifications carry no payload guarantee.
    """

    def __init__(self, client: AsyncClient | None, table: str = DEFAULT_TABLE) -> None:
        self._client = client
        self._table = table
        self._channel_ids = itertools.count(1)
        self._pending: set[asyncio.Task[None]] = set()

    @classmethod
    async def connect(cls, settings: Settings) -> LiveStatusClient:
        """Build a client from settings, staying unconfigured on placeholders."""
        if not settings.backend_configured:
            log.warning("Supabase is not configured - live status source disabled")
            return cls(None, table=settings.status_table)
        client = await acreate_client(settings.supabase_url, settings.supabase_anon_key)
        return cls(client, table=settings.status_table)

    @property
    def name(self) -> str:
        return "live"

    @property
    def mode(self) -> BackendMode:
        return BackendMode.CONFIGURED if self._client is not None else BackendMode.UNCONFIGURED

    async def fetch_all(self) -> list[ServiceStatus]:
        """Return every row ordered by service name, or [] if unavailable."""
        if self._client is None:
            log.warning("[%s] Backend not configured - using fallback data", self.name)
            return []

        try:
            return await self._select(self._client)
        except _BACKEND_ERRORS as exc:
            log.error("[%s] Error fetching statuses: %s", self.name, exc)
            return []

    async def _select(self, client: AsyncClient) -> list[ServiceStatus]:
        """Read the table, letting backend errors propagate."""
        resp = await client.table(self._table).select("*").order("service").execute()
        services: list[ServiceStatus] = []
        for row in resp.data or []:
            try:
                services.append(ServiceStatus.from_row(row))
            except (KeyError, ValueError, TypeError) as exc:
                log.warning("[%s] Skipping malformed row %r: %s", self.name, row, exc)
        return services

    async def update_one(self, service_id: str, state: ServiceState) -> bool:
        """Persist a new state for one row.

        Backend failures are logged and reported as False, never raised.
        """
        if self._client is None:
            log.warning("[%s] Backend not configured - cannot update status", self.name)
            return False

        try:
            new_state = ServiceState.parse(state)
        except ValueError as exc:
            log.error("[%s] Refusing to update %s: %s", self.name, service_id, exc)
            return False

        payload = {
            "status": new_state.value,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            resp = await (
                self._client.table(self._table).update(payload).eq("id", service_id).execute()
            )
        except _BACKEND_ERRORS as exc:
            log.error("[%s] Error updating %s: %s", self.name, service_id, exc)
            return False

        if not resp.data:
            log.warning("[%s] Update matched no row with id %s", self.name, service_id)
            return False
        log.info("[%s] %s set to %s", self.name, service_id, payload["status"])
        return True

    async def fetch_snapshot(self) -> list[ServiceStatus]:
        return await self.fetch_all()

    async def mutate(self, service_id: str, state: ServiceState) -> bool:
        return await self.update_one(service_id, state)

    async def subscribe(
        self, on_change: Callable[[list[ServiceStatus]], Awaitable[None] | Any]
    ) -> Subscription:
        """Open a realtime channel on the table and re-read on every change.

        Each call owns its own channel, removed exactly once on unsubscribe.
        """
        if self._client is None:
            log.warning("[%s] Backend not configured - real-time updates disabled", self.name)
            return Subscription()

        client = self._client
        subscription: Subscription

        async def _refresh() -> None:
            try:
                services = await self._select(client)
            except _BACKEND_ERRORS as exc:
                # Keep the subscriber on its last good set.
                log.error("[%s] Re-read after change failed, skipping delivery: %s", self.name, exc)
                return
            if not subscription.active:
                log.debug("[%s] Dropping update delivered after unsubscribe", self.name)
                return
            try:
                await deliver(on_change, services)
            except Exception:
                log.exception("[%s] Change handler failed", self.name)

        def _on_postgres_change(payload: dict[str, Any]) -> None:
            log.debug("[%s] Change on %s: %s", self.name, self._table, payload.get("eventType"))
            task = asyncio.create_task(_refresh())
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        channel = client.channel(f"{CHANNEL_PREFIX}-{next(self._channel_ids)}")
        channel.on_postgres_changes(
            "*", callback=_on_postgres_change, table=self._table, schema="public"
        )
        await channel.subscribe()
        log.info("[%s] Subscribed to changes on %s", self.name, self._table)

        async def _remove_channel() -> None:
            await client.remove_channel(channel)
            log.info("[%s] Unsubscribed from %s", self.name, self._table)

        subscription = Subscription(_remove_channel)
        return subscription

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
