"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~deckinventory.exceptions.DeckInventoryError` subclass.

Example::

    $ deckinventory refresh --force
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- the inventory endpoint was unreachable
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONNECTION_ERROR = 6
"""The inventory endpoint could not be reached or returned an error status."""

EXIT_PARSE_ERROR = 7
"""A response body or cache file could not be parsed."""

EXIT_STORAGE_ERROR = 8
"""The cache file could not be read or written."""
