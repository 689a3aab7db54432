"""Typer application and CLI entry point for deckinventory.

The CLI drives a :class:`~deckinventory.cache.DeckInventoryCache` from the
shell: ``list`` prints the deck identifiers (refreshing the cache file when
it is stale), ``refresh`` forces a cycle, ``status`` inspects the cache file
without touching the network, and ``clear`` removes it. ``config`` views
and edits the global configuration.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from deckinventory import __version__
from deckinventory.cache import DeckInventoryCache, create_cache
from deckinventory.commands.config import config_app
from deckinventory.config import load_global_config, resolve_config
from deckinventory.exceptions import ConfigError, DeckInventoryError
from deckinventory.exit_codes import EXIT_GENERIC_FAILURE
from deckinventory.models import DeckInventorySnapshot, GlobalConfig, utcnow
from deckinventory.output import (
    OutputFormat,
    OutputManager,
    error,
    print_decks,
    print_record,
    info,
    set_output,
    success,
    suggest,
    warning,
)

app = typer.Typer(
    name="deckinventory",
    help="Keep a locally cached deck inventory in sync with the analytics endpoint.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config", help="Configuration management.")

_log_handler: Optional[logging.Handler] = None


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"deckinventory {__version__}")
        raise typer.Exit()


def _configure_logging(output: OutputManager) -> None:
    """Route the package logger to the diagnostics console.

    ``--verbose`` shows the refresh progress (INFO), ``--quiet`` only
    errors, and the default level is WARNING.
    """
    global _log_handler
    logger = logging.getLogger("deckinventory")
    if _log_handler is not None:
        logger.removeHandler(_log_handler)
    _log_handler = RichHandler(
        console=output.stderr_console,
        show_path=False,
        show_time=output.is_verbose,
    )
    logger.addHandler(_log_handler)
    if output.is_verbose:
        logger.setLevel(logging.DEBUG)
    elif output.is_quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARNING)



def _saved_format() -> OutputFormat:
    """Return ``output.format`` from the global config, or ``AUTO``.

    A broken config file is reported by the command itself when it
    resolves its configuration.
    """
    try:
        return OutputFormat(load_global_config().output.format)
    except (ConfigError, ValueError):
        return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    data_dir: Optional[str] = typer.Option(
        None, "--data-dir", help="Directory holding the cache file."
    ),
    url: Optional[str] = typer.Option(
        None, "--url", help="Override the inventory endpoint URL."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~deckinventory.output.OutputManager`,
    wires logging to it, and stores the configuration overrides in
    ``ctx.obj`` for the sub-commands.
    """
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _saved_format()

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["url"] = url


def _resolve(ctx: typer.Context) -> GlobalConfig:
    obj = ctx.obj or {}
    return resolve_config(cli_data_dir=obj.get("data_dir"), cli_url=obj.get("url"))


def _report_placeholder(snapshot: DeckInventorySnapshot, config: GlobalConfig) -> None:
    if snapshot.is_placeholder:
        warning(
            "The deck inventory could not be fetched. "
            f"A retry is allowed in {config.cache.failure_retry_minutes:g} minutes."
        )
        suggest("Run with --verbose to see the failure.")


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


async def _refresh_and_read(cache: DeckInventoryCache) -> tuple[DeckInventorySnapshot, list[str]]:
    snapshot = await cache.refresh()
    return snapshot, cache.get_available_decks()


@app.command("list")
def list_decks(ctx: typer.Context) -> None:
    """Print the available deck identifiers.

    Loads the cache file and fetches a fresh inventory first if the file is
    missing or stale.

    Example::

        deckinventory list
        deckinventory --json list
    """
    config = _resolve(ctx)
    cache = create_cache(config)
    snapshot, decks = asyncio.run(_refresh_and_read(cache))
    _report_placeholder(snapshot, config)
    info(f"{len(decks)} deck(s) available.")
    print_decks(decks)


@app.command("refresh")
def refresh(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Ignore the cache file and always fetch."
    ),
) -> None:
    """Run one refresh cycle and print the resulting snapshot summary.

    Example::

        deckinventory refresh
        deckinventory refresh --force
    """
    config = _resolve(ctx)
    cache = create_cache(config)
    snapshot = asyncio.run(cache.refresh(force=force))
    if snapshot.is_placeholder:
        _report_placeholder(snapshot, config)
    else:
        success(f"Deck inventory ready: {snapshot.summary()}")


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Describe the cache file without contacting the endpoint.

    Example::

        deckinventory status
        deckinventory --json status
    """
    config = _resolve(ctx)
    cache = create_cache(config)
    store = cache.store
    snapshot = asyncio.run(store.load())
    if snapshot is None:
        info(f"No cached deck inventory at {store.path}")
        suggest("Run 'deckinventory refresh' to fetch one.")
        return

    now = utcnow()
    expires = snapshot.client_timestamp + config.cache.ttl
    print_record(
        {
            "path": str(store.path),
            "count": len(snapshot.identifiers),
            "server_timestamp": (
                snapshot.server_timestamp.isoformat() if snapshot.server_timestamp else None
            ),
            "client_timestamp": snapshot.client_timestamp.isoformat(),
            "age": str(snapshot.age(now)),
            "stale": snapshot.is_stale(config.cache.ttl, now=now),
            "placeholder": snapshot.is_placeholder,
            "refresh_after": expires.isoformat(),
        },
        title="Deck inventory cache",
    )


@app.command("clear")
def clear(ctx: typer.Context) -> None:
    """Delete the cache file.

    Example::

        deckinventory clear
    """
    config = _resolve(ctx)
    store = create_cache(config).store
    if store.clear():
        success(f"Removed {store.path}")
    else:
        info(f"No cache file at {store.path}")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from deckinventory.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``deckinventory`` console script.

    :class:`~deckinventory.exceptions.DeckInventoryError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except DeckInventoryError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
