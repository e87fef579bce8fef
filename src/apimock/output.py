"""Operator-facing output with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (the ``apis`` table, ``config show``
  JSON). Prism's own request log is inherited by the child process and
  also lands here, untouched.
* **stderr** -- every status line apimock prints around the mock server
  (download progress, "running at", shutdown notices, errors).
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- holds Rich consoles and the quiet/verbose
   flags. Created once in :func:`~apimock.app.main_callback` and installed
   via :func:`set_output`.
2. Module-level helpers (:func:`info`, :func:`error`, :func:`status`, ...)
   that delegate to the global instance.

Internal diagnostics use :mod:`logging`; :func:`configure_logging` routes
them through :class:`rich.logging.RichHandler` when ``--verbose`` is set.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table


class OutputFormat(str, Enum):
    """Formats for stdout data.

    ``AUTO`` resolves to ``RICH`` on an interactive TTY with colour enabled,
    and to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        format: Desired stdout format. ``AUTO`` resolves based on TTY detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
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

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """The Rich console bound to stderr, shared with the log handler."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Print *data* as indented JSON to stdout."""
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table`.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            self.print_json([dict(zip(headers, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, "[green]{}[/green]")

    def warning(self, message: str) -> None:
        """Yellow warning. NOT suppressed by ``--quiet``."""
        if self._no_color:
            self._emit(f"Warning: {message}")
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Bold-red error. Never suppressed."""
        if self._no_color:
            self._emit(f"Error: {message}")
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        """Dimmed next-step hint, prefixed with an arrow. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(f"→ {message}", "[dim]{}[/dim]")

    def debug(self, message: str) -> None:
        """Debug message, only shown with ``--verbose``."""
        if self._verbose:
            self._emit(f"[debug] {message}", "[dim]{}[/dim]")

    def prompt(self, message: str) -> None:
        """Write *message* to stderr without a trailing newline (e.g. ``Press q to quit``)."""
        if not self._quiet:
            sys.stderr.write(message)
            sys.stderr.flush()

    def newline(self) -> None:
        if not self._quiet:
            sys.stderr.write("\n")
            sys.stderr.flush()

    @contextlib.contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner with *message* on stderr while the block runs.

        Falls back to a single plain line when stderr is not a terminal,
        colour is disabled, or ``--quiet`` is active (the line is then
        suppressed entirely).
        """
        if self._quiet:
            yield
            return
        if self._no_color or not self._stderr.is_terminal:
            self._emit(f"{message}...")
            yield
            return
        with self._stderr.status(message):
            yield

    def _emit(self, message: str, markup: str = "{}") -> None:
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup.format(message))


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


def configure_logging(verbose: bool) -> None:
    """Attach a :class:`~rich.logging.RichHandler` to the ``apimock`` logger.

    Without ``--verbose`` only warnings from internal loggers reach stderr.
    Calling this again replaces the previously installed handler.
    """
    logger = logging.getLogger("apimock")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(
        console=get_output().stderr_console,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def suggest(message: str) -> None:
    """Print next-step suggestion to stderr via the global OutputManager."""
    get_output().suggest(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)


def prompt(message: str) -> None:
    get_output().prompt(message)


def newline() -> None:
    get_output().newline()


def status(message: str) -> contextlib.AbstractContextManager[None]:
    """Spinner context manager via the global OutputManager."""
    return get_output().status(message)
