"""Tests for the refresh-completed listener registry."""

from __future__ import annotations

import logging

import pytest

from deckinventory.cache import RefreshListeners


class TestRefreshListeners:
    def test_notify_calls_in_order(self) -> None:
        calls: list[str] = []
        listeners = RefreshListeners()
        listeners.subscribe(lambda: calls.append("first"))
        listeners.subscribe(lambda: calls.append("second"))

        listeners.notify()

        assert calls == ["first", "second"]

    def test_subscribe_is_idempotent(self) -> None:
        calls: list[int] = []

        def listener() -> None:
            calls.append(1)

        listeners = RefreshListeners()
        listeners.subscribe(listener)
        listeners.subscribe(listener)
        listeners.notify()

        assert len(listeners) == 1
        assert calls == [1]

    def test_subscribe_as_decorator(self) -> None:
        listeners = RefreshListeners()

        @listeners.subscribe
        def on_refresh() -> None:
            pass

        assert callable(on_refresh)
        assert len(listeners) == 1

    def test_unsubscribe(self) -> None:
        calls: list[int] = []

        def listener() -> None:
            calls.append(1)

        listeners = RefreshListeners()
        listeners.subscribe(listener)
        listeners.unsubscribe(listener)
        listeners.notify()

        assert calls == []

    def test_unsubscribe_unknown_is_noop(self) -> None:
        RefreshListeners().unsubscribe(lambda: None)

    def test_failing_listener_does_not_stop_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        calls: list[str] = []

        def broken() -> None:
            raise RuntimeError("listener bug")

        listeners = RefreshListeners()
        listeners.subscribe(broken)
        listeners.subscribe(lambda: calls.append("ok"))

        with caplog.at_level(logging.WARNING, logger="deckinventory.cache.events"):
            listeners.notify()

        assert calls == ["ok"]
        assert "Refresh listener" in caplog.text

    def test_listener_may_unsubscribe_itself(self) -> None:
        listeners = RefreshListeners()
        calls: list[int] = []

        def once() -> None:
            calls.append(1)
            listeners.unsubscribe(once)

        listeners.subscribe(once)
        listeners.notify()
        listeners.notify()

        assert calls == [1]
