"""Status Board -- entry point.

Assembles the dashboard pipeline:

    StatusSource (polling HTTP API, or live Supabase table)
        -> subscribe(consumer.feed)
        -> DashboardConsumer task (reacts to queue.get(), renders with rich)

A shared httpx.AsyncClient is injected into the polling source.  The live
source owns one realtime channel per subscription.  Which source is wired
in is decided by configuration (``STATUS_BOARD_SOURCE``) or ``--source``.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

import httpx
from rich.console import Console

from consumers.dashboard import DashboardConsumer, build_view, render
from consumers.editor import StatusEditor
from core.registry import SourceRegistry
from core.settings import Settings
from providers.live import BackendMode, LiveStatusClient
from providers.polling import PollingStatusClient

log = logging.getLogger(__name__)


def build_registry(client: httpx.AsyncClient) -> SourceRegistry:
    registry = SourceRegistry()

    async def _polling(settings: Settings) -> PollingStatusClient:
        return PollingStatusClient(
            client=client,
            status_url=settings.status_api,
            stats_url=settings.platform_stats_api,
            status_interval=settings.status_interval,
            stats_interval=settings.stats_interval,
        )

    registry.register("polling", _polling)
    registry.register("live", LiveStatusClient.connect)
    return registry


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="status-board",
        description="Real-time service status dashboard.",
    )
    parser.add_argument(
        "--source",
        choices=["polling", "live"],
        help="Data source to wire in (default: STATUS_BOARD_SOURCE or 'polling')",
    )
    parser.add_argument(
        "--edit",
        action="store_true",
        help="Open the status editor (requires a source that accepts updates)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Render a single snapshot and exit",
    )
    parser.add_argument("--log-level", help="Override STATUS_BOARD_LOG_LEVEL")
    args = parser.parse_args(argv)
    if args.edit and args.source == "polling":
        parser.error("--edit needs the live source")
    return args


async def run(args: argparse.Namespace, settings: Settings) -> None:
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console = Console()

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        registry = build_registry(client)
        # The editor writes rows, which only the live source supports.
        source = await registry.create(settings, "live" if args.edit else args.source)
        log.info("Dashboard wired to the %s source", source.name)

        try:
            if args.edit:
                editor = StatusEditor(source)
                await editor.load()
                subscription = await source.subscribe(editor.apply)
                try:
                    await editor.run_interactive(console)
                finally:
                    await subscription.unsubscribe()
                return

            mode = getattr(source, "mode", BackendMode.CONFIGURED)
            if args.once:
                console.print(render(build_view(await source.fetch_snapshot(), mode=mode)))
                return

            consumer = DashboardConsumer(console=console, mode=mode)
            if isinstance(source, LiveStatusClient):
                # Pollers fetch on start; the live channel only fires on change.
                consumer.feed(await source.fetch_snapshot())
            subscription = await source.subscribe(consumer.feed)
            try:
                await asyncio.create_task(consumer.run(), name=type(consumer).__name__)
            finally:
                await subscription.unsubscribe()
        finally:
            await source.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = Settings()
    try:
        asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        print("\nShutting down.")


if __name__ == "__main__":
    main()
