"""Tests for wire-format parsing of status models."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from models.status import (
    PlatformStats,
    ServiceState,
    ServiceStatus,
    StatusSnapshot,
    parse_timestamp,
)


class TestServiceStateParse:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Operational", ServiceState.OPERATIONAL),
            ("partial outage", ServiceState.PARTIAL_OUTAGE),
            ("Degraded", ServiceState.PARTIAL_OUTAGE),
            ("major_outage", ServiceState.MAJOR_OUTAGE),
            ("outage", ServiceState.MAJOR_OUTAGE),
            (" Maintenance ", ServiceState.MAINTENANCE),
            (ServiceState.MAINTENANCE, ServiceState.MAINTENANCE),
        ],
    )
    def test_values_and_aliases(self, raw, expected):
        assert ServiceState.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["Down", "", None, "operational-ish"])
    def test_rejects_free_text(self, raw):
        with pytest.raises(ValueError):
            ServiceState.parse(raw)


class TestServiceStatusFromRow:

    def test_maps_table_columns(self):
        status = ServiceStatus.from_row(
            {"id": 7, "service": "Auth", "status": "Maintenance", "updated_at": "2024-03-01T12:00:00Z"}
        )
        assert status.id == "7"
        assert status.name == "Auth"
        assert status.state is ServiceState.MAINTENANCE
        assert status.updated_at == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError):
            ServiceStatus.from_row({"id": 1, "service": "Auth", "status": "Sleeping"})


class TestSnapshotParsing:

    def test_status_snapshot(self, status_payload):
        snapshot = StatusSnapshot.from_json(status_payload)
        assert snapshot.overall_status == "degraded"
        assert [c.name for c in snapshot.components] == ["API", "DB"]
        assert snapshot.incidents == []
        assert snapshot.last_updated == datetime(2024, 5, 1, 10, 6, tzinfo=timezone.utc)

    def test_status_snapshot_requires_overall_status(self, status_payload):
        del status_payload["overall_status"]
        with pytest.raises(KeyError):
            StatusSnapshot.from_json(status_payload)

    def test_incidents_are_parsed(self, status_payload):
        status_payload["incidents"] = [
            {
                "id": "inc-1",
                "title": "Elevated errors",
                "status": "investigating",
                "description": "Looking into it",
                "created_at": "2024-05-01T09:00:00Z",
                "updated_at": "2024-05-01T09:30:00Z",
            }
        ]
        incident = StatusSnapshot.from_json(status_payload).incidents[0]
        assert incident.title == "Elevated errors"
        assert incident.status == "investigating"

    def test_platform_stats_defaults_missing_counters(self, stats_payload):
        stats = PlatformStats.from_json(stats_payload)
        assert stats.get("totalUsers") == "12,345"
        assert stats.get("totalMarketplaceItems") == "0"


class TestParseTimestamp:

    def test_fractional_seconds_and_zulu(self):
        ts = parse_timestamp("2024-05-01T10:00:00.123456Z")
        assert ts is not None and ts.tzinfo is not None
        assert ts.microsecond == 123456

    @pytest.mark.parametrize("raw", [None, "", "yesterday", 12])
    def test_bad_values_become_none(self, raw):
        assert parse_timestamp(raw) is None
