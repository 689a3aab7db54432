"""Canonical Pydantic models shared across all deckinventory modules.

The models fall into two groups:

**Inventory models** -- the data the cache serves:
    :class:`RemoteInventory` (the wire document returned by the analytics
    endpoint) and :class:`DeckInventorySnapshot` (the immutable value held
    in memory and persisted to disk).

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`CacheConfig`, :class:`OutputConfig`
    and :class:`GlobalConfig`.

All timestamps are timezone-aware UTC. Naive values read from disk or the
wire are interpreted as UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

DEFAULT_INVENTORY_URL = "https://hsreplay.net/analytics/query/list_deck_inventory"
DEFAULT_CACHE_FILENAME = "deck_inventory.json"


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Naive datetimes are read as UTC.
UTCDatetime = Annotated[datetime, AfterValidator(_as_utc)]


# --- Inventory models ---


class RemoteInventory(BaseModel):
    """The JSON document returned by the deck inventory endpoint.

    Example payload::

        {"series": ["AAEBAf0E...", "AAECAR8..."], "as_of": "2024-05-01T12:00:00Z"}

    ``series`` is required and may not be ``null``; ``as_of`` may be
    omitted. Unknown keys are ignored.
    """

    series: list[str]
    as_of: Optional[UTCDatetime] = None


class DeckInventorySnapshot(BaseModel):
    """One immutable copy of the deck inventory plus its timestamps.

    Snapshots are never mutated; a refresh always replaces the whole value.
    Staleness is derived from :attr:`client_timestamp` and the caller's
    notion of *now* on every check, it is never stored.

    Serialised with :meth:`to_json` using the wire names ``series`` and
    ``as_of`` so the cache file mirrors the remote document plus
    ``client_timestamp``.

    Attributes:
        identifiers: Deck identifiers in server order.
        server_timestamp: The ``as_of`` time reported by the endpoint, or
            ``None`` for a failure placeholder.
        client_timestamp: When this snapshot was obtained locally.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identifiers: tuple[str, ...] = Field(default=(), alias="series")
    server_timestamp: Optional[UTCDatetime] = Field(default=None, alias="as_of")
    client_timestamp: UTCDatetime

    @classmethod
    def from_remote(cls, remote: RemoteInventory, fetched_at: datetime) -> DeckInventorySnapshot:
        """Build a snapshot from a freshly fetched document."""
        return cls(
            identifiers=tuple(remote.series),
            server_timestamp=remote.as_of,
            client_timestamp=fetched_at,
        )

    @classmethod
    def placeholder(cls, client_timestamp: datetime) -> DeckInventorySnapshot:
        """Build an empty snapshot used when no data could be fetched."""
        return cls(identifiers=(), client_timestamp=client_timestamp)

    @property
    def is_placeholder(self) -> bool:
        """``True`` for the empty snapshot written after a failed fetch."""
        return self.server_timestamp is None and not self.identifiers

    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Return how long ago this snapshot was obtained."""
        return (now or utcnow()) - self.client_timestamp

    def is_stale(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        """Return ``True`` if the snapshot is strictly older than *ttl*."""
        return self.age(now) > ttl

    def to_json(self) -> str:
        """Serialise to the cache file format."""
        return self.model_dump_json(by_alias=True, indent=2) + "\n"

    def summary(self, now: Optional[datetime] = None) -> str:
        """One-line description used in log messages and ``status`` output."""
        server = self.server_timestamp.isoformat() if self.server_timestamp else "-"
        return (
            f"Count={len(self.identifiers)}, ServerTS={server}, "
            f"Downloaded={self.client_timestamp.isoformat()}, Age={self.age(now)}"
        )

    def __str__(self) -> str:
        return self.summary()


# --- Configuration models ---


class RequestConfig(BaseModel):
    """HTTP settings for the inventory endpoint."""

    url: str = Field(default=DEFAULT_INVENTORY_URL, description="Inventory endpoint URL")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class CacheConfig(BaseModel):
    """Snapshot lifetime and on-disk location."""

    ttl_hours: float = Field(default=24.0, gt=0, description="Snapshot lifetime in hours")
    failure_retry_minutes: float = Field(
        default=30.0,
        gt=0,
        description="Minutes to wait before retrying after a failed fetch",
    )
    data_dir: Optional[str] = Field(
        default=None, description="Directory holding the cache file (default: XDG data dir)"
    )
    filename: str = Field(default=DEFAULT_CACHE_FILENAME, description="Cache file name")

    @model_validator(mode="after")
    def _retry_within_ttl(self) -> CacheConfig:
        if self.failure_retry > self.ttl:
            raise ValueError("failure_retry_minutes must not exceed ttl_hours")
        return self

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self.ttl_hours)

    @property
    def failure_retry(self) -> timedelta:
        return timedelta(minutes=self.failure_retry_minutes)


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/deckinventory/config.json``.

    Loaded and saved by :func:`~deckinventory.config.load_global_config` and
    :func:`~deckinventory.config.save_global_config`. Environment variables
    and CLI flags override individual fields; see
    :func:`~deckinventory.config.resolve_config`.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
