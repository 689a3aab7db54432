"""Terminal output for the deckinventory CLI.

Data goes to stdout and diagnostics to stderr, so ``deckinventory list``
can be piped into other tools while warnings still reach the user:

* **stdout** -- deck identifiers and status records.
* **stderr** -- progress, warnings, errors, next-step hints and log records.

The active :class:`OutputFormat` decides how data is rendered. ``AUTO``
picks Rich when stdout is a terminal and colour is allowed, plain text
otherwise. Colour is disabled by ``--no-color``, ``NO_COLOR`` or
``TERM=dumb``.

One :class:`OutputManager` is installed per invocation by
:func:`~deckinventory.app.main_callback`; the module-level helpers
(:func:`info`, :func:`warning`, ...) forward to it.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders data and diagnostics for one CLI invocation.

    Args:
        format: Requested format. ``AUTO`` is resolved once, here.
        no_color: Disable colour and markup on both streams.
        quiet: Drop info, success and hint messages. Warnings, errors and
            data are always written.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """Console for diagnostics. The CLI's log handler writes here too."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def print_decks(self, decks: list[str]) -> None:
        """Write deck identifiers, one per line (a JSON array in JSON mode)."""
        if self._format == OutputFormat.JSON:
            self._emit_json(decks)
        elif self._format == OutputFormat.RICH:
            table = Table(show_header=True, header_style="bold cyan", box=None)
            table.add_column("#", justify="right", style="dim")
            table.add_column("Deck")
            for index, deck in enumerate(decks, start=1):
                table.add_row(str(index), deck)
            self._stdout.print(table)
        else:
            for deck in decks:
                self.print_data(deck)

    def print_record(self, record: dict[str, Any], title: Optional[str] = None) -> None:
        """Write a flat record such as the ``status`` report.

        Rich mode draws a two-column table, plain mode writes
        ``key<TAB>value`` lines and JSON mode writes a single object.
        """
        if self._format == OutputFormat.JSON:
            self._emit_json(record)
        elif self._format == OutputFormat.RICH:
            table = Table(title=title, show_header=False, box=None)
            table.add_column(style="bold")
            table.add_column()
            for key, value in record.items():
                table.add_row(key, "-" if value is None else str(value))
            self._stdout.print(table)
        else:
            for key, value in record.items():
                self.print_data(f"{key}\t{'' if value is None else value}")

    def format_response(self, data: Any) -> None:
        """Write arbitrary JSON-compatible *data*, e.g. the configuration."""
        if self._format == OutputFormat.JSON:
            self._emit_json(data)
        elif isinstance(data, dict) and self._format == OutputFormat.PLAIN:
            for key, value in data.items():
                self.print_data(f"{key}\t{json.dumps(value, default=str)}")
        elif isinstance(data, (dict, list)):
            self._stdout.print_json(json.dumps(data, default=str))
        else:
            self.print_data(str(data))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def _emit_json(self, data: Any) -> None:
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._diagnostic(message, optional=True)

    def success(self, message: str) -> None:
        self._diagnostic(message, style="green", optional=True)

    def warning(self, message: str) -> None:
        self._diagnostic(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, label="Error:", style="bold red")

    def suggest(self, message: str) -> None:
        """Print a next-step hint such as ``→ Run 'deckinventory refresh'``."""
        self._diagnostic(f"→ {message}", style="dim", optional=True)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", style="dim")

    def _diagnostic(
        self,
        message: str,
        label: str = "",
        style: str = "",
        optional: bool = False,
    ) -> None:
        if optional and self._quiet:
            return
        if self._no_color:
            text = f"{label} {message}" if label else message
            print(text, file=sys.stderr, flush=True)
            return
        if label:
            # Only the label is styled; the message may contain brackets.
            self._stderr.print(f"[{style}]{label}[/{style}] ", end="")
            self._stderr.print(message, markup=False, highlight=False)
        elif style:
            self._stderr.print(message, style=style, markup=False, highlight=False)
        else:
            self._stderr.print(message, markup=False, highlight=False)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` disable colour."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Tests call this between CLI invocations."""
    global _output
    _output = None


def print_decks(decks: list[str]) -> None:
    get_output().print_decks(decks)


def print_record(record: dict[str, Any], title: Optional[str] = None) -> None:
    get_output().print_record(record, title)


def format_response(data: Any) -> None:
    get_output().format_response(data)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
