from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from consumers.styles import label_for, style_for
from core.aggregator import overall_state
from core.errors import MutationFailed
from models.status import ServiceState, ServiceStatus
from providers.base import StatusSource

log = logging.getLogger(__name__)

STATE_CHOICES = [s.value for s in ServiceState]


class StatusEditor:
    """Operator view that changes one service's state at a time.

    The change is shown optimistically while the write is in flight.  If the
    source rejects it, the prior state is put back and ``last_error`` holds
    a ``MutationFailed``.  Deliveries from the source's subscription replace
    the local list wholesale via ``apply()``.
    """

    def __init__(self, source: StatusSource[list[ServiceStatus]]) -> None:
        self._source = source
        self.services: list[ServiceStatus] = []
        self.updating: str | None = None
        self.last_error: MutationFailed | None = None
        self.loaded = False

    @property
    def overall(self) -> ServiceState:
        return overall_state(self.services)

    async def load(self) -> list[ServiceStatus]:
        self.apply(await self._source.fetch_snapshot())
        self.loaded = True
        return self.services

    def apply(self, services: list[ServiceStatus]) -> None:
        self.services = list(services)

    def find(self, service_id: str) -> ServiceStatus | None:
        return next((s for s in self.services if s.id == service_id), None)

    def _replace(self, updated: ServiceStatus) -> None:
        self.services = [updated if s.id == updated.id else s for s in self.services]

    async def change_status(self, service_id: str, state: ServiceState | str) -> bool:
        new_state = ServiceState.parse(state)
        prior = self.find(service_id)
        if prior is None:
            raise KeyError(service_id)

        self.updating = service_id
        self.last_error = None
        optimistic = replace(prior, state=new_state, updated_at=datetime.now(timezone.utc))
        self._replace(optimistic)
        try:
            ok = await self._source.mutate(service_id, new_state)
        finally:
            self.updating = None

        if not ok:
            # Only undo our own row; a subscription delivery may have replaced it.
            if self.find(service_id) is optimistic:
                self._replace(prior)
            self.last_error = MutationFailed(service_id, new_state.value)
            log.warning("Keeping %s at %s: %s", prior.name, prior.state.value, self.last_error)
        return ok

    def render(self) -> Table:
        stamp = f"Last updated: {datetime.now().strftime('%H:%M:%S')}"
        if self.services:
            overall = self.overall
            style = style_for(overall)
            caption = Text.assemble(
                "Overall: ", (label_for(overall), f"bold {style.color}"), f"   {stamp}"
            )
        else:
            caption = Text(f"No services loaded   {stamp}", style="yellow")
        table = Table(title="System Status Editor", caption=caption)
        table.add_column("#", justify="right")
        table.add_column("Service")
        table.add_column("Status")
        for index, service in enumerate(self.services, start=1):
            s = style_for(service.state)
            marker = " (updating)" if self.updating == service.id else ""
            table.add_row(
                str(index),
                service.name,
                Text(f"{s.icon} {label_for(service.state)}{marker}", style=s.color),
            )
        return table

    async def run_interactive(self, console: Console | None = None) -> None:
        """Prompt loop: pick a service by number, then a state from the enum."""
        console = console or Console()
        if not self.loaded:
            await self.load()
        while True:
            console.print(self.render())
            if not self.services:
                console.print("[yellow]No services available - is the backend configured?[/]")
                return
            choices = [str(i) for i in range(1, len(self.services) + 1)] + ["q"]
            picked = await asyncio.to_thread(
                Prompt.ask, "Service to update (q to quit)", choices=choices, console=console
            )
            if picked == "q":
                return
            service = self.services[int(picked) - 1]
            state = await asyncio.to_thread(
                Prompt.ask,
                f"New status for {service.name}",
                choices=STATE_CHOICES,
                default=service.state.value,
                console=console,
            )
            if not await self.change_status(service.id, state):
                console.print(f"[red]Update failed; {service.name} left unchanged.[/]")
