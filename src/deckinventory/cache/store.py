"""Whole-file JSON persistence for deck inventory snapshots.

The cache file holds exactly one serialised
:class:`~deckinventory.models.DeckInventorySnapshot`::

    {
      "series": ["AAEBAf0E...", "AAECAR8..."],
      "as_of": "2024-05-01T12:00:00Z",
      "client_timestamp": "2024-05-01T12:03:10.512000Z"
    }

The file is always read and written as one text blob. Writes go through
:func:`~deckinventory.config.atomic_write` so a crash never leaves a
half-written file behind. File I/O runs in a worker thread via
:func:`asyncio.to_thread` so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from deckinventory.config import atomic_write
from deckinventory.exceptions import DiskReadError, DiskWriteError, ParseError
from deckinventory.models import DeckInventorySnapshot


class SnapshotStore:
    """Read/write the snapshot cache file.

    Args:
        path: Full path of the cache file. Its parent directory is created
            on first write.

    Example::

        store = SnapshotStore(get_data_dir() / "deck_inventory.json")
        await store.save(snapshot)
        assert (await store.load()) == snapshot
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """The filesystem path to the cache file."""
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    async def load(self) -> Optional[DeckInventorySnapshot]:
        """Load the persisted snapshot.

        Returns:
            The snapshot, or ``None`` if no cache file exists.

        Raises:
            DiskReadError: If the file exists but cannot be read.
            ParseError: If the file content is not a valid snapshot.
        """
        if not self.exists():
            return None
        try:
            text = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DiskReadError(f"Cannot read cache file {self._path}: {exc}") from exc
        try:
            return DeckInventorySnapshot.model_validate_json(text)
        except ValidationError as exc:
            raise ParseError(f"Invalid cache file {self._path}: {exc}") from exc

    async def save(self, snapshot: DeckInventorySnapshot) -> None:
        """Persist *snapshot*, replacing any previous file.

        Raises:
            DiskWriteError: If the file cannot be written (permissions,
                disk full, path is a directory, etc.).
        """
        text = snapshot.to_json()
        try:
            await asyncio.to_thread(atomic_write, self._path, text)
        except OSError as exc:
            raise DiskWriteError(f"Cannot write cache file {self._path}: {exc}") from exc

    def clear(self) -> bool:
        """Delete the cache file.

        Returns:
            ``True`` if a file was removed, ``False`` if there was none.
        """
        if not self.exists():
            return False
        self._path.unlink()
        return True
