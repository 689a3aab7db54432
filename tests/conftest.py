"""Shared test fixtures for deckinventory.

Provides isolated XDG directories, a controllable clock, and helpers for
building :class:`httpx.MockTransport` instances that stand in for the
inventory endpoint.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from deckinventory.output import reset_output

INVENTORY_URL = "https://analytics.test/query/list_deck_inventory"
T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Isolated environment
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and data directories under tmp_path.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    forces the XDG code path, and clears DECKINVENTORY_* variables.
    """
    monkeypatch.setattr("deckinventory.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("DECKINVENTORY_DATA_DIR", raising=False)
    monkeypatch.delenv("DECKINVENTORY_URL", raising=False)
    return tmp_path


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def inventory_payload(
    series: list[str] | None = None,
    as_of: str = "2024-05-01T06:00:00Z",
) -> dict[str, Any]:
    """Build a remote inventory document."""
    return {
        "series": ["DeckA", "DeckB"] if series is None else series,
        "as_of": as_of,
    }


class RecordingHandler:
    """MockTransport handler that records requests and replays a fixed response."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def ok_handler() -> RecordingHandler:
    """Handler returning the default two-deck inventory."""
    return RecordingHandler(lambda request: httpx.Response(200, json=inventory_payload()))


@pytest.fixture
def failing_handler() -> RecordingHandler:
    """Handler that simulates a refused connection."""

    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return RecordingHandler(_refuse)


@pytest.fixture
def make_handler() -> type[RecordingHandler]:
    """Factory for handlers with a custom responder."""
    return RecordingHandler


@pytest.fixture
def inventory_url() -> str:
    return INVENTORY_URL


@pytest.fixture
def t0() -> datetime:
    """The fake clock's starting time."""
    return T0
