"""Disk-backed deck inventory caching.

This package provides :class:`DeckInventoryCache`, which serves deck
identifiers without blocking while refreshing a JSON cache file in the
background, together with its collaborators :class:`SnapshotStore` and
:class:`RefreshListeners`.

:func:`create_cache` wires the pieces together from a
:class:`~deckinventory.models.GlobalConfig`.
"""

from __future__ import annotations

from typing import Optional

import httpx

from deckinventory.cache.events import RefreshListener, RefreshListeners
from deckinventory.cache.inventory import Clock, DeckInventoryCache
from deckinventory.cache.store import SnapshotStore
from deckinventory.client import InventoryClient
from deckinventory.config import resolve_config, resolve_data_dir
from deckinventory.models import GlobalConfig, utcnow

__all__ = [
    "DeckInventoryCache",
    "RefreshListener",
    "RefreshListeners",
    "SnapshotStore",
    "create_cache",
]


def create_cache(
    config: Optional[GlobalConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Clock = utcnow,
) -> DeckInventoryCache:
    """Build a :class:`DeckInventoryCache` from configuration.

    Args:
        config: Effective configuration. When ``None`` it is resolved with
            :func:`~deckinventory.config.resolve_config`.
        transport: Optional :mod:`httpx` transport passed to every client.
        clock: Source of the current UTC time.

    Returns:
        A cache whose store lives at ``<data dir>/<cache.filename>``. No
        refresh has been started; call :meth:`DeckInventoryCache.start`
        from inside the event loop.
    """
    if config is None:
        config = resolve_config()
    store = SnapshotStore(resolve_data_dir(config) / config.cache.filename)
    request = config.request

    def _client_factory() -> InventoryClient:
        return InventoryClient(request, transport=transport)

    return DeckInventoryCache(store, _client_factory, config=config.cache, clock=clock)
