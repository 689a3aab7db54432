"""Exception hierarchy for deckinventory.

All exceptions inherit from :class:`DeckInventoryError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`deckinventory.exit_codes`. Inside the library these exceptions are
raised by the client and the snapshot store and are caught, logged and
converted to "no data" by :class:`~deckinventory.cache.inventory.DeckInventoryCache`.
The CLI entry point :func:`deckinventory.app.main` maps any that escape to
the matching exit code.

Subclass hierarchy::

    DeckInventoryError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- FetchError          (exit 6)
    |   +-- NetworkError    (exit 6)
    +-- ParseError          (exit 7)
    +-- StorageError        (exit 8)
        +-- DiskReadError   (exit 8)
        +-- DiskWriteError  (exit 8)
"""

from __future__ import annotations

from typing import Optional

from deckinventory.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PARSE_ERROR,
    EXIT_STORAGE_ERROR,
)


class DeckInventoryError(Exception):
    """Base exception for all deckinventory errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(DeckInventoryError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(DeckInventoryError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class FetchError(DeckInventoryError):
    """Base class for failures while retrieving the remote inventory."""

    exit_code = EXIT_CONNECTION_ERROR


class NetworkError(FetchError):
    """Raised on transport failures or a non-success HTTP status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status returned by the server, or ``None``
            when no response was received (timeout, DNS, refused).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(DeckInventoryError):
    """Raised when a response body or cache file is not a valid inventory document."""

    exit_code = EXIT_PARSE_ERROR


class StorageError(DeckInventoryError):
    """Base class for cache file I/O failures."""

    exit_code = EXIT_STORAGE_ERROR


class DiskReadError(StorageError):
    """Raised when the cache file exists but cannot be read."""


class DiskWriteError(StorageError):
    """Raised when the cache file cannot be written."""
