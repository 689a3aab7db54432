"""Tests for deckinventory.models -- snapshots, remote payloads, config."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from deckinventory.models import (
    DEFAULT_INVENTORY_URL,
    CacheConfig,
    DeckInventorySnapshot,
    GlobalConfig,
    RemoteInventory,
)

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(hours=24)


def _snapshot(**overrides: object) -> DeckInventorySnapshot:
    fields: dict[str, object] = {
        "identifiers": ("DeckA", "DeckB"),
        "server_timestamp": T0 - timedelta(hours=6),
        "client_timestamp": T0,
    }
    fields.update(overrides)
    return DeckInventorySnapshot(**fields)


# ---------------------------------------------------------------------------
# Staleness
# ---------------------------------------------------------------------------


class TestStaleness:
    def test_fresh_snapshot(self) -> None:
        snap = _snapshot()
        assert snap.is_stale(DAY, now=T0 + timedelta(hours=1)) is False

    def test_exactly_ttl_is_not_stale(self) -> None:
        """Staleness is strictly greater than the TTL."""
        snap = _snapshot()
        assert snap.is_stale(DAY, now=T0 + DAY) is False

    def test_just_past_ttl_is_stale(self) -> None:
        snap = _snapshot()
        assert snap.is_stale(DAY, now=T0 + DAY + timedelta(seconds=1)) is True

    def test_recomputed_on_every_check(self) -> None:
        snap = _snapshot()
        assert snap.is_stale(DAY, now=T0) is False
        assert snap.is_stale(DAY, now=T0 + timedelta(days=2)) is True
        assert snap.is_stale(DAY, now=T0) is False

    def test_age(self) -> None:
        snap = _snapshot()
        assert snap.age(now=T0 + timedelta(minutes=90)) == timedelta(minutes=90)

    def test_age_defaults_to_wall_clock(self) -> None:
        snap = _snapshot(client_timestamp=datetime.now(timezone.utc) - timedelta(hours=2))
        assert timedelta(hours=2) <= snap.age() < timedelta(hours=2, minutes=1)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestSnapshotConstruction:
    def test_from_remote(self) -> None:
        remote = RemoteInventory(series=["X", "Y", "Z"], as_of=T0 - timedelta(hours=3))
        snap = DeckInventorySnapshot.from_remote(remote, fetched_at=T0)
        assert snap.identifiers == ("X", "Y", "Z")
        assert snap.server_timestamp == T0 - timedelta(hours=3)
        assert snap.client_timestamp == T0

    def test_placeholder(self) -> None:
        snap = DeckInventorySnapshot.placeholder(T0)
        assert snap.identifiers == ()
        assert snap.server_timestamp is None
        assert snap.is_placeholder is True

    def test_fetched_snapshot_is_not_placeholder(self) -> None:
        assert _snapshot().is_placeholder is False

    def test_frozen(self) -> None:
        snap = _snapshot()
        with pytest.raises(ValidationError):
            snap.identifiers = ("Other",)  # type: ignore[misc]

    def test_naive_timestamps_are_utc(self) -> None:
        snap = DeckInventorySnapshot(client_timestamp=datetime(2024, 5, 1, 12, 0))
        assert snap.client_timestamp == T0
        assert snap.client_timestamp.tzinfo is not None

    def test_client_timestamp_required(self) -> None:
        with pytest.raises(ValidationError):
            DeckInventorySnapshot(identifiers=("A",))  # type: ignore[call-arg]

    def test_summary(self) -> None:
        text = _snapshot().summary(now=T0 + timedelta(hours=1))
        assert text.startswith("Count=2, ServerTS=2024-05-01T06:00:00+00:00")
        assert "Downloaded=2024-05-01T12:00:00+00:00" in text
        assert text.endswith("Age=1:00:00")


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------


class TestSnapshotSerialisation:
    def test_json_uses_wire_names(self) -> None:
        data = json.loads(_snapshot().to_json())
        assert data["series"] == ["DeckA", "DeckB"]
        assert "as_of" in data
        assert "client_timestamp" in data
        assert "identifiers" not in data

    def test_json_roundtrip(self) -> None:
        snap = _snapshot(client_timestamp=T0 + timedelta(microseconds=512))
        restored = DeckInventorySnapshot.model_validate_json(snap.to_json())
        assert restored == snap

    def test_placeholder_roundtrip(self) -> None:
        snap = DeckInventorySnapshot.placeholder(T0)
        restored = DeckInventorySnapshot.model_validate_json(snap.to_json())
        assert restored.identifiers == ()
        assert restored.server_timestamp is None
        assert restored.client_timestamp == T0


# ---------------------------------------------------------------------------
# Remote payload
# ---------------------------------------------------------------------------


class TestRemoteInventory:
    def test_parses_document(self) -> None:
        remote = RemoteInventory.model_validate_json(
            '{"series": ["A", "B"], "as_of": "2024-05-01T06:00:00Z", "extra": 1}'
        )
        assert remote.series == ["A", "B"]
        assert remote.as_of == T0 - timedelta(hours=6)

    def test_as_of_optional(self) -> None:
        assert RemoteInventory(series=[]).as_of is None

    def test_null_series_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RemoteInventory.model_validate({"series": None, "as_of": "2024-05-01T06:00:00Z"})

    def test_missing_series_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RemoteInventory.model_validate({"as_of": "2024-05-01T06:00:00Z"})


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestCacheConfig:
    def test_defaults(self) -> None:
        config = CacheConfig()
        assert config.ttl == timedelta(hours=24)
        assert config.failure_retry == timedelta(minutes=30)
        assert config.data_dir is None
        assert config.filename == "deck_inventory.json"

    def test_retry_longer_than_ttl_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CacheConfig(ttl_hours=1, failure_retry_minutes=90)

    @pytest.mark.parametrize("field", ["ttl_hours", "failure_retry_minutes"])
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            CacheConfig(**{field: 0})

    def test_global_defaults(self) -> None:
        config = GlobalConfig()
        assert config.request.url == DEFAULT_INVENTORY_URL
        assert config.request.timeout == 30
        assert config.output.format == "auto"
