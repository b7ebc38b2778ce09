from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse ISO 8601 timestamps that may include fractional seconds.

    Returns None for missing or malformed values so that a bad timestamp
    never prevents the rest of a snapshot from rendering.
    """
    if not raw or not isinstance(raw, str):
        return None
    cleaned = raw.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ServiceState(str, Enum):
    """Closed set of states a monitored service can be in."""

    OPERATIONAL = "Operational"
    PARTIAL_OUTAGE = "Partial Outage"
    MAJOR_OUTAGE = "Major Outage"
    MAINTENANCE = "Maintenance"

    @classmethod
    def parse(cls, raw: Any) -> ServiceState:
        """Map a wire value (or one of its aliases) onto the enum.

        Raises ValueError for anything outside the closed set.
        """
        if isinstance(raw, cls):
            return raw
        key = str(raw).strip().lower()
        state = _SERVICE_ALIASES.get(key)
        if state is None:
            raise ValueError(f"unknown service state: {raw!r}")
        return state


_SERVICE_ALIASES: dict[str, ServiceState] = {
    **{s.value.lower(): s for s in ServiceState},
    "degraded": ServiceState.PARTIAL_OUTAGE,
    "partial_outage": ServiceState.PARTIAL_OUTAGE,
    "outage": ServiceState.MAJOR_OUTAGE,
    "major_outage": ServiceState.MAJOR_OUTAGE,
}


class ComponentState(str, Enum):
    """State vocabulary used by the polling status endpoint."""

    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    OUTAGE = "outage"
    MAINTENANCE = "maintenance"


class IncidentState(str, Enum):
    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class ServiceStatus:
    """One row of the live status table.

    Fields:
        id:         Opaque row identifier, stable across updates.
        name:       Human-readable service label (the ``service`` column).
        state:      Current state, always a member of ServiceState.
        updated_at: Time of the last state change (UTC).
    """

    id: str
    name: str
    state: ServiceState
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ServiceStatus:
        """Build from a ``{id, service, status, updated_at}`` row.

        Raises KeyError or ValueError when the row does not fit the model.
        """
        return cls(
            id=str(row["id"]),
            name=str(row["service"]),
            state=ServiceState.parse(row["status"]),
            updated_at=parse_timestamp(row.get("updated_at")),
        )


@dataclass(frozen=True)
class Component:
    name: str
    status: str
    last_updated: datetime | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Component:
        return cls(
            name=str(data["name"]),
            status=str(data["status"]),
            last_updated=parse_timestamp(data.get("last_updated")),
        )


@dataclass(frozen=True)
class Incident:
    """An incident or a scheduled maintenance event (same shape)."""

    id: str
    title: str
    status: str
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Incident:
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            status=str(data["status"]),
            description=str(data.get("description") or ""),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time payload of the status endpoint.

    ``overall_status`` is computed upstream by the status API; this client
    displays it as-is.
    """

    overall_status: str
    message: str
    components: list[Component] = field(default_factory=list)
    incidents: list[Incident] = field(default_factory=list)
    maintenance_events: list[Incident] = field(default_factory=list)
    last_updated: datetime | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> StatusSnapshot:
        return cls(
            overall_status=str(data["overall_status"]),
            message=str(data.get("message") or ""),
            components=[Component.from_json(c) for c in data.get("components") or []],
            incidents=[Incident.from_json(i) for i in data.get("incidents") or []],
            maintenance_events=[
                Incident.from_json(m) for m in data.get("maintenance_events") or []
            ],
            last_updated=parse_timestamp(data.get("last_updated")),
        )


STAT_COUNTERS = (
    "totalUsers",
    "activeUsers",
    "totalPosts",
    "totalTickets",
    "totalPartners",
    "totalEvents",
    "totalMarketplaceItems",
)


@dataclass(frozen=True)
class PlatformStats:
    """Pre-formatted platform counters; display data only."""

    counters: dict[str, str] = field(default_factory=dict)
    last_updated: datetime | None = None

    def get(self, name: str) -> str:
        return self.counters.get(name) or "0"

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> PlatformStats:
        if not isinstance(data, dict):
            raise TypeError("platform stats payload must be an object")
        counters = {
            name: str(data[name])
            for name in STAT_COUNTERS
            if data.get(name) is not None
        }
        return cls(counters=counters, last_updated=parse_timestamp(data.get("lastUpdated")))
