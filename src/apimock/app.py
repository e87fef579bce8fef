"""Typer application and CLI entry point for apimock.

This module wires the top-level Typer application, registers the built-in
commands (``mock``, ``apis``, ``config``), and installs the root callback
that configures output and logging.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. It installs a SIGTERM handler so that a terminated
apimock still stops its Prism child, invokes the Typer app, and maps
:class:`~apimock.exceptions.ApiMockError` subclasses to exit codes.
Unexpected exceptions are written to a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from apimock import __version__
from apimock.commands.apis import apis_command
from apimock.commands.config import config_app
from apimock.commands.mock import mock_command
from apimock.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="apimock",
    help="Run local Prism mock servers from cached OpenAPI specs.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.command("mock")(mock_command)
app.command("apis")(apis_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apimock {__version__}")
        raise typer.Exit()


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
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~apimock.output.OutputManager`, attaches the
    Rich log handler, and stores shared flags in ``ctx.obj``.
    """
    from apimock.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Turn SIGTERM into ``SystemExit`` so ``finally`` blocks stop the mock server."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.exit(128 + signum)

    signal.signal(signal.SIGTERM, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from apimock.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``apimock`` console script.

    :class:`~apimock.exceptions.ApiMockError` instances exit with the
    error's ``exit_code`` after printing the message. Ctrl-C outside the
    quit wait exits with 130. Anything else produces a crash log and a
    generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from apimock.exceptions import ApiMockError
        from apimock.output import error

        if isinstance(exc, ApiMockError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
