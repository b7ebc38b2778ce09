"""Tests for configuration, source selection and change fan-out."""
from __future__ import annotations

import httpx
import pytest

from core.event_bus import EventBus, Subscription
from core.registry import SourceRegistry
from core.settings import (
    DEFAULT_PLATFORM_STATS_API,
    DEFAULT_STATUS_API,
    PLACEHOLDER_SUPABASE_URL,
    Settings,
)
from main import build_registry, parse_args
from providers.live import BackendMode, LiveStatusClient
from providers.polling import PollingStatusClient


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("STATUS_API", "SUPABASE_URL", "SOURCE"):
            monkeypatch.delenv(f"STATUS_BOARD_{name}", raising=False)
        settings = Settings(_env_file=None)

        assert settings.status_api == DEFAULT_STATUS_API
        assert settings.platform_stats_api == DEFAULT_PLATFORM_STATS_API
        assert settings.supabase_url == PLACEHOLDER_SUPABASE_URL
        assert settings.source == "polling"
        assert settings.status_interval == 60
        assert settings.stats_interval == 30
        assert settings.backend_configured is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STATUS_BOARD_STATUS_API", "https://example.test/status")
        monkeypatch.setenv("STATUS_BOARD_SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.setenv("STATUS_BOARD_SOURCE", "live")
        settings = Settings(_env_file=None)

        assert settings.status_api == "https://example.test/status"
        assert settings.source == "live"
        assert settings.backend_configured is True


class TestSourceRegistry:

    @pytest.mark.asyncio
    async def test_polling_is_built_from_settings(self):
        settings = Settings(_env_file=None, status_api="https://example.test/s", status_interval=5)
        async with httpx.AsyncClient() as http:
            source = await build_registry(http).create(settings, "polling")

        assert isinstance(source, PollingStatusClient)
        assert source.status_url == "https://example.test/s"
        assert source._status.interval_seconds == 5

    @pytest.mark.asyncio
    async def test_live_with_placeholders_is_unconfigured(self):
        settings = Settings(_env_file=None, source="live")
        async with httpx.AsyncClient() as http:
            source = await build_registry(http).create(settings)

        assert isinstance(source, LiveStatusClient)
        assert source.mode is BackendMode.UNCONFIGURED

    @pytest.mark.asyncio
    async def test_unknown_source(self):
        with pytest.raises(ValueError, match="unknown status source"):
            await SourceRegistry().create(Settings(_env_file=None), "carrier-pigeon")


class TestEventBus:

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block_others(self):
        bus = EventBus()
        received = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(received.append)
        await bus.publish("snapshot")

        assert received == ["snapshot"]

    @pytest.mark.asyncio
    async def test_unsubscribe_runs_teardown_once(self):
        closed = []

        async def on_close():
            closed.append(True)

        bus = EventBus()
        subscription = bus.subscribe(lambda payload: None, on_close=on_close)
        await subscription.unsubscribe()
        await subscription.unsubscribe()

        assert closed == [True]
        assert bus.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_inert_subscription(self):
        subscription = Subscription()
        await subscription.unsubscribe()
        assert subscription.active is False


class TestArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.source is None
        assert not args.edit and not args.once

    def test_live_editor(self):
        args = parse_args(["--source", "live", "--edit"])
        assert args.source == "live"
        assert args.edit
