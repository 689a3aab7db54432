"""Callback registry for the refresh-completed notification.

:class:`RefreshListeners` holds zero-argument callables and invokes them in
subscription order. A listener that raises is logged and skipped so that
one faulty observer can neither interrupt the others nor fail the refresh
that triggered the notification.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

RefreshListener = Callable[[], None]


class RefreshListeners:
    """Ordered set of refresh-completed callbacks."""

    def __init__(self) -> None:
        self._listeners: list[RefreshListener] = []

    def subscribe(self, listener: RefreshListener) -> RefreshListener:
        """Register *listener*. Registering the same callable twice is a no-op.

        Returns the listener unchanged so the method can be used as a
        decorator.
        """
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: RefreshListener) -> None:
        """Remove *listener*; unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def notify(self) -> None:
        """Invoke every listener once."""
        # Copy so listeners may unsubscribe themselves while being notified.
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.warning("Refresh listener %r failed", listener, exc_info=True)

    def __len__(self) -> int:
        return len(self._listeners)
