"""The deck inventory cache: non-blocking reads over a self-refreshing snapshot.

:class:`DeckInventoryCache` serves the best available list of deck
identifiers immediately and keeps it current in the background:

1. :meth:`~DeckInventoryCache.get_available_decks` never suspends. It
   returns the current identifiers while they are fresh or while a refresh
   is running, and otherwise schedules a refresh and returns an empty list.
2. A refresh loads the cache file; if that copy is missing or stale it
   fetches the remote inventory and writes the result back. A failed fetch
   produces an empty placeholder backdated so that it goes stale after the
   configured retry interval (30 minutes by default) instead of the full
   time-to-live.
3. Only one refresh runs at a time. Callers that ask for a refresh while
   one is in flight share its result.
4. Every completed refresh fires the subscribed listeners exactly once.

Errors from the store and the client are caught, logged and converted to
"no data" inside :meth:`DeckInventoryCache._refresh`; nothing propagates to
readers.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from deckinventory.cache.events import RefreshListener, RefreshListeners
from deckinventory.cache.store import SnapshotStore
from deckinventory.client import InventoryClient
from deckinventory.exceptions import DeckInventoryError
from deckinventory.models import CacheConfig, DeckInventorySnapshot, utcnow

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], InventoryClient]
Clock = Callable[[], datetime]


class DeckInventoryCache:
    """Disk-backed, self-refreshing deck inventory.

    The instance is owned by the host application; there is no module-level
    state. All refresh work happens on the running asyncio event loop.

    Args:
        store: Persistence for the snapshot cache file.
        client_factory: Zero-argument callable returning a fresh
            :class:`~deckinventory.client.InventoryClient`, entered once
            per fetch.
        config: Time-to-live and failure retry interval.
        clock: Returns the current aware UTC time. Injected by tests.

    Example::

        cache = DeckInventoryCache(store, lambda: InventoryClient(RequestConfig()))
        cache.subscribe(on_decks_changed)
        cache.start()
        ...
        decks = cache.get_available_decks()
    """

    def __init__(
        self,
        store: SnapshotStore,
        client_factory: ClientFactory,
        config: Optional[CacheConfig] = None,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._client_factory = client_factory
        self._config = config or CacheConfig()
        self._clock = clock
        self._snapshot: Optional[DeckInventorySnapshot] = None
        self._refreshing = False
        self._task: Optional[asyncio.Task[DeckInventorySnapshot]] = None
        self._listeners = RefreshListeners()

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def snapshot(self) -> Optional[DeckInventorySnapshot]:
        """The committed snapshot, or ``None`` before the first refresh completes."""
        return self._snapshot

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    def is_stale(self, snapshot: DeckInventorySnapshot) -> bool:
        """Return ``True`` if *snapshot* is older than the configured TTL right now."""
        return snapshot.is_stale(self._config.ttl, now=self._clock())

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #

    def get_available_decks(self) -> list[str]:
        """Return the current deck identifiers without waiting.

        Returns the committed identifiers when they are fresh, or when a
        refresh is already running (an empty list if nothing has been
        committed yet). Otherwise a background refresh is scheduled and an
        empty list is returned for this call.
        """
        snapshot = self._snapshot
        if self._refreshing or (snapshot is not None and not self.is_stale(snapshot)):
            return list(snapshot.identifiers) if snapshot is not None else []
        self._spawn_refresh()
        return []

    # ------------------------------------------------------------------ #
    # Refreshing
    # ------------------------------------------------------------------ #

    def start(self) -> Optional[asyncio.Task[DeckInventorySnapshot]]:
        """Schedule the initial refresh on the running loop.

        Returns the in-flight task (an existing one if a refresh is already
        running), or ``None`` when called outside an event loop.
        """
        if self._refreshing and self._task is not None:
            return self._task
        return self._spawn_refresh()

    async def refresh(self, force: bool = False) -> DeckInventorySnapshot:
        """Run a refresh cycle and return the committed snapshot.

        If a refresh is already in flight this awaits that one instead of
        starting another, and *force* is ignored. Cancelling the caller
        does not cancel the refresh.

        Args:
            force: Skip the cache file and always fetch from the endpoint.
        """
        task = self._task if self._refreshing else None
        if task is None:
            task = self._spawn_refresh(force)
        assert task is not None, "refresh() requires a running event loop"
        return await asyncio.shield(task)

    async def wait(self) -> Optional[DeckInventorySnapshot]:
        """Wait for the in-flight refresh, if any, and return the committed snapshot."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self._snapshot

    def subscribe(self, listener: RefreshListener) -> RefreshListener:
        """Call *listener* after every completed refresh. Usable as a decorator."""
        return self._listeners.subscribe(listener)

    def unsubscribe(self, listener: RefreshListener) -> None:
        self._listeners.unsubscribe(listener)

    def _spawn_refresh(self, force: bool = False) -> Optional[asyncio.Task[DeckInventorySnapshot]]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, deck inventory refresh not started")
            return None
        # Set before the task runs so readers see the refresh immediately.
        self._refreshing = True
        self._task = loop.create_task(self._refresh(force), name="deck-inventory-refresh")
        return self._task

    async def _refresh(self, force: bool) -> DeckInventorySnapshot:
        try:
            snapshot = None if force else await self._load_from_disk()
            if snapshot is None or self.is_stale(snapshot):
                logger.info("Cached data was not found or stale. Fetching latest...")
                snapshot = await self._fetch()
                if snapshot is None:
                    logger.warning(
                        "No data. Can retry in %s.", self._config.failure_retry
                    )
                    snapshot = DeckInventorySnapshot.placeholder(
                        self._clock() - (self._config.ttl - self._config.failure_retry)
                    )
                await self._persist(snapshot)
            self._snapshot = snapshot
            logger.info("Complete: %s", snapshot.summary(self._clock()))
            self._listeners.notify()
            return snapshot
        finally:
            self._refreshing = False

    async def _load_from_disk(self) -> Optional[DeckInventorySnapshot]:
        logger.info("Loading data from disk (%s)...", self._store.path)
        try:
            snapshot = await self._store.load()
        except DeckInventoryError as exc:
            logger.error("Discarding cached deck inventory: %s", exc)
            return None
        if snapshot is not None:
            logger.info("Loaded from disk: %s", snapshot.summary(self._clock()))
        return snapshot

    async def _fetch(self) -> Optional[DeckInventorySnapshot]:
        try:
            async with self._client_factory() as client:
                remote = await client.fetch_inventory()
        except DeckInventoryError as exc:
            logger.error("Deck inventory fetch failed: %s", exc)
            return None
        except Exception:
            logger.exception("Unexpected error fetching deck inventory")
            return None
        return DeckInventorySnapshot.from_remote(remote, fetched_at=self._clock())

    async def _persist(self, snapshot: DeckInventorySnapshot) -> None:
        logger.info("Writing data to disk...")
        try:
            await self._store.save(snapshot)
        except DeckInventoryError as exc:
            logger.error("Could not persist deck inventory: %s", exc)
