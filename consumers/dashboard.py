from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from consumers.base import SnapshotConsumer
from consumers.styles import Style, label_for, style_for
from core.aggregator import overall_state
from core.resource import Phase
from models.status import Incident, PlatformStats, ServiceStatus
from providers.live import BackendMode
from providers.polling import PollingView

log = logging.getLogger(__name__)

METRIC_LABELS = (
    ("totalUsers", "Total Users"),
    ("activeUsers", "Active Users"),
    ("totalPosts", "Builds Shared"),
    ("totalTickets", "Support Tickets"),
    ("totalPartners", "Partners"),
    ("totalEvents", "Events"),
    ("totalMarketplaceItems", "Marketplace Items"),
)


@dataclass(frozen=True)
class Row:
    name: str
    label: str
    style: Style
    updated_at: datetime | None = None


@dataclass(frozen=True)
class IncidentRow:
    title: str
    label: str
    style: Style
    description: str
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class DashboardView:
    """Everything one render of the dashboard shows.

    ``updated_at`` is the data's own timestamp; ``rendered_at`` is local
    wall-clock time of this render, so a reader can tell a live page from
    one showing stale data.
    """

    phase: Phase
    rendered_at: datetime
    overall_label: str = ""
    overall_style: Style = field(default_factory=lambda: style_for(None))
    message: str = ""
    updated_at: datetime | None = None
    metrics: list[tuple[str, str]] | None = None
    rows: list[Row] = field(default_factory=list)
    incidents: list[IncidentRow] = field(default_factory=list)
    maintenance: list[IncidentRow] = field(default_factory=list)
    notice: str = ""


def _incident_rows(incidents: list[Incident]) -> list[IncidentRow]:
    return [
        IncidentRow(
            title=i.title,
            label=label_for(i.status),
            style=style_for(i.status),
            description=i.description,
            created_at=i.created_at,
            updated_at=i.updated_at,
        )
        for i in incidents
    ]


def _metrics(stats: PlatformStats | None) -> list[tuple[str, str]] | None:
    if stats is None:
        return None
    return [(label, stats.get(key)) for key, label in METRIC_LABELS]


def build_polling_view(view: PollingView, rendered_at: datetime | None = None) -> DashboardView:
    """View of the polling source: overall status is taken from upstream."""
    rendered_at = rendered_at or datetime.now(timezone.utc)
    metrics = _metrics(view.stats.data)
    snapshot = view.status.data
    if snapshot is None:
        return DashboardView(phase=view.status.phase, rendered_at=rendered_at, metrics=metrics)

    return DashboardView(
        phase=view.status.phase,
        rendered_at=rendered_at,
        overall_label=label_for(snapshot.overall_status),
        overall_style=style_for(snapshot.overall_status),
        message=snapshot.message,
        updated_at=snapshot.last_updated,
        metrics=metrics,
        rows=[
            Row(c.name, label_for(c.status), style_for(c.status), c.last_updated)
            for c in snapshot.components
        ],
        incidents=_incident_rows(snapshot.incidents),
        maintenance=_incident_rows(snapshot.maintenance_events),
    )


def build_live_view(
    services: list[ServiceStatus],
    rendered_at: datetime | None = None,
    mode: BackendMode = BackendMode.CONFIGURED,
) -> DashboardView:
    """View of the live source: overall status is aggregated locally.

    An empty table gets no overall badge at all; with no backend configured
    the view carries a placeholder notice instead.
    """
    rendered_at = rendered_at or datetime.now(timezone.utc)
    if not services:
        notice = (
            "Live backend not configured."
            if mode is BackendMode.UNCONFIGURED
            else "No service data available right now."
        )
        return DashboardView(phase=Phase.EMPTY, rendered_at=rendered_at, notice=notice)

    overall = overall_state(services)
    stamps = [s.updated_at for s in services if s.updated_at is not None]
    return DashboardView(
        phase=Phase.READY,
        rendered_at=rendered_at,
        overall_label=label_for(overall),
        overall_style=style_for(overall),
        updated_at=max(stamps) if stamps else None,
        rows=[Row(s.name, label_for(s.state), style_for(s.state), s.updated_at) for s in services],
    )


def build_view(
    snapshot: Any,
    rendered_at: datetime | None = None,
    mode: BackendMode = BackendMode.CONFIGURED,
) -> DashboardView:
    if isinstance(snapshot, PollingView):
        return build_polling_view(snapshot, rendered_at)
    return build_live_view(list(snapshot), rendered_at, mode)


def _time(ts: datetime | None, fmt: str = "%H:%M:%S") -> str:
    return ts.astimezone().strftime(fmt) if ts is not None else "-"


def _badge(label: str, style: Style) -> Text:
    return Text(f"{style.icon} {label}", style=f"bold {style.color}")


def _incident_panel(title: str, rows: list[IncidentRow], border: str) -> Panel:
    items: list[RenderableType] = []
    for row in rows:
        head = Text.assemble((row.title, "bold"), "  ", _badge(row.label, row.style))
        items.append(head)
        if row.description:
            items.append(Text(row.description))
        items.append(
            Text(
                f"Created: {_time(row.created_at, '%Y-%m-%d %H:%M')}  "
                f"Updated: {_time(row.updated_at, '%Y-%m-%d %H:%M')}",
                style="dim",
            )
        )
    return Panel(Group(*items), title=title, border_style=border)


def render(view: DashboardView) -> RenderableType:
    """Turn a DashboardView into a rich renderable."""
    if view.phase is Phase.LOADING:
        return Panel(
            Text("Fetching the latest operational data.", style="dim"),
            title="Loading status...",
            border_style="grey50",
        )
    if view.phase is Phase.ERROR:
        return Panel(
            Text(
                "We're experiencing issues connecting to the status API. "
                "Please try again later.",
                style="red",
            ),
            title="Unable to fetch status",
            border_style="red",
        )
    if view.phase is Phase.EMPTY:
        return Panel(
            Text(view.notice, style="yellow"),
            title="No status to show",
            border_style="grey50",
        )

    parts: list[RenderableType] = []
    header = Text.assemble(
        _badge(view.overall_label, view.overall_style),
        ("   Last updated: ", "dim"),
        (_time(view.updated_at), "dim"),
    )
    body: list[RenderableType] = [header]
    if view.message:
        body.append(Text(view.message))
    if view.phase is Phase.STALE:
        body.append(Text("Showing last known status; latest refresh failed.", style="yellow"))
    parts.append(Panel(Group(*body), border_style=view.overall_style.color))

    if view.metrics is not None:
        metrics = Table(title="Live Platform Metrics", show_header=True, expand=True)
        for label, _ in view.metrics:
            metrics.add_column(label, justify="center")
        metrics.add_row(*(value for _, value in view.metrics))
        parts.append(metrics)

    components = Table(title="Component Status", expand=True)
    components.add_column("")
    components.add_column("Component")
    components.add_column("Updated", style="dim")
    components.add_column("Status", justify="right")
    for row in view.rows:
        components.add_row(
            Text(row.style.icon, style=row.style.color),
            row.name,
            _time(row.updated_at),
            Text(row.label, style=f"bold {row.style.color}"),
        )
    parts.append(components)

    if view.incidents:
        parts.append(_incident_panel("Recent Incidents", view.incidents, "yellow"))
    if view.maintenance:
        parts.append(_incident_panel("Scheduled Maintenance", view.maintenance, "blue"))

    parts.append(Text(f"Rendered at {_time(view.rendered_at)}", style="dim"))
    return Group(*parts)


class DashboardConsumer(SnapshotConsumer):
    """Re-renders the dashboard to the terminal for every delivered snapshot."""

    def __init__(
        self,
        console: Console | None = None,
        mode: BackendMode = BackendMode.CONFIGURED,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.console = console or Console()
        self.mode = mode
        self.last_view: DashboardView | None = None

    async def process(self, snapshot: Any) -> None:
        view = build_view(snapshot, mode=self.mode)
        self.last_view = view
        log.debug("Rendering %s dashboard (%d rows)", view.phase.value, len(view.rows))
        self.console.print(render(view))
