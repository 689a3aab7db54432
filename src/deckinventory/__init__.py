"""deckinventory -- a locally cached deck inventory list for desktop clients.

This package keeps a list of deck identifiers published by a remote analytics
endpoint available to a host application without ever blocking it. The list
is persisted to disk, expires after a fixed time-to-live, and is refreshed in
the background by a single in-flight asyncio task.

Typical use inside an async host::

    from deckinventory.cache import create_cache

    cache = create_cache()
    cache.subscribe(lambda: print(cache.get_available_decks()))
    cache.start()

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for snapshots and configuration.
    config: XDG-aware configuration management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
