"""Shared fixtures: an in-memory stand-in for the Supabase async client and
canned status endpoint payloads."""
from __future__ import annotations

from typing import Any, Callable

import pytest
from postgrest.exceptions import APIError


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


class FakeQuery:
    """Mimics the chained ``table().select().order().execute()`` builder."""

    def __init__(self, db: FakeSupabase, table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._order: str | None = None
        self._filters: list[tuple[str, Any]] = []
        self._payload: dict[str, Any] = {}

    def select(self, *_columns: str) -> FakeQuery:
        self._op = "select"
        return self

    def order(self, column: str) -> FakeQuery:
        self._order = column
        return self

    def update(self, payload: dict[str, Any]) -> FakeQuery:
        self._op = "update"
        self._payload = payload
        return self

    def eq(self, column: str, value: Any) -> FakeQuery:
        self._filters.append((column, value))
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(col)) == str(val) for col, val in self._filters)

    async def execute(self) -> FakeResponse:
        self._db.queries.append((self._op, self._table, list(self._filters)))
        if self._db.fail_with is not None:
            raise self._db.fail_with

        rows = self._db.tables.setdefault(self._table, [])
        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self._payload)
                    updated.append(dict(row))
            if updated:
                self._db.notify(self._table, "UPDATE")
            return FakeResponse(updated)

        result = [dict(r) for r in rows if self._matches(r)]
        if self._order:
            result.sort(key=lambda r: r[self._order])
        return FakeResponse(result)


class FakeChannel:
    def __init__(self, topic: str) -> None:
        self.topic = topic
        self.subscribed = False
        self.handlers: list[tuple[str, str, Callable[[dict[str, Any]], None]]] = []

    def on_postgres_changes(
        self,
        event: str,
        callback: Callable[[dict[str, Any]], None],
        table: str = "*",
        schema: str = "public",
        filter: str | None = None,
    ) -> FakeChannel:
        self.handlers.append((event, table, callback))
        return self

    async def subscribe(self) -> FakeChannel:
        self.subscribed = True
        return self

    def emit(self, table: str, event_type: str) -> None:
        for _event, watched, callback in self.handlers:
            if watched in ("*", table):
                callback({"eventType": event_type, "table": table, "schema": "public"})


class FakeSupabase:
    """Just enough of ``supabase.AsyncClient`` for the live source."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, table: str = "statuses") -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {table: [dict(r) for r in rows or []]}
        self.channels: list[FakeChannel] = []
        self.removed: list[FakeChannel] = []
        self.queries: list[tuple[str, str, list[tuple[str, Any]]]] = []
        self.fail_with: Exception | None = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def channel(self, topic: str) -> FakeChannel:
        channel = FakeChannel(topic)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel: FakeChannel) -> None:
        channel.subscribed = False
        self.removed.append(channel)

    def notify(self, table: str, event_type: str) -> None:
        for channel in self.channels:
            if channel.subscribed:
                channel.emit(table, event_type)


def api_error(message: str = "permission denied") -> APIError:
    return APIError({"message": message, "code": "42501", "hint": "", "details": ""})


@pytest.fixture
def status_rows() -> list[dict[str, Any]]:
    return [
        {"id": 2, "service": "DB", "status": "Major Outage", "updated_at": "2024-01-01T00:00:00Z"},
        {"id": 1, "service": "API", "status": "Operational", "updated_at": "2024-01-01T00:00:00Z"},
    ]


@pytest.fixture
def fake_supabase(status_rows) -> FakeSupabase:
    return FakeSupabase(status_rows)


@pytest.fixture
def status_payload() -> dict[str, Any]:
    return {
        "overall_status": "degraded",
        "message": "m",
        "components": [
            {"name": "API", "status": "operational", "last_updated": "2024-05-01T10:00:00Z"},
            {"name": "DB", "status": "degraded", "last_updated": "2024-05-01T10:05:00Z"},
        ],
        "incidents": [],
        "maintenance_events": [],
        "last_updated": "2024-05-01T10:06:00Z",
    }


@pytest.fixture
def stats_payload() -> dict[str, Any]:
    return {
        "totalUsers": "12,345",
        "activeUsers": "1,024",
        "totalPosts": "3,210",
        "totalTickets": "42",
        "totalPartners": "17",
        "lastUpdated": "2024-05-01T10:06:00Z",
    }
