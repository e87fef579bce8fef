"""Mock command -- launch a Prism mock server for a registered API.

Implements ``apimock mock <api>``. The OpenAPI spec is downloaded into the
cache directory on first use (or on ``--latest``), then Prism is started
against it and kept running until ``q`` is pressed.
"""

from __future__ import annotations

from typing import Optional

import typer

from apimock.registry import supported_apis


def _complete_api(incomplete: str) -> list[str]:
    return [name for name in supported_apis() if name.startswith(incomplete)]


def mock_command(
    api: str = typer.Argument(
        ...,
        help="The API to mock (e.g. sms).",
        autocompletion=_complete_api,
        show_default=False,
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        min=1,
        max=65535,
        help="Port to run the mock server on. [default: 4010]",
        rich_help_panel="Mock Server",
    ),
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Host to bind the mock server to. [default: localhost]",
        rich_help_panel="Mock Server",
    ),
    download_only: bool = typer.Option(
        False,
        "--download-only",
        help="Only download the OpenAPI spec without starting the server.",
        rich_help_panel="Mock Server",
    ),
    latest: bool = typer.Option(
        False,
        "--latest",
        help="Force re-download of the OpenAPI spec even if it already exists.",
        rich_help_panel="Mock Server",
    ),
) -> None:
    """Launch a mock server for an API using Prism.

    Port and host fall back to ``default_port`` / ``default_host`` from
    ``config.json`` (4010 and ``localhost`` out of the box).

    Raises:
        UnsupportedApiError: For an unregistered API name (exit 2).
        DirectoryError: If the spec cache cannot be written (exit 3).
        DownloadError: If the spec cannot be fetched (exit 4).
        SpawnError: If Prism cannot be launched (exit 5).

    Example::

        apimock mock sms
        apimock mock sms --port 8080
        apimock mock sms --download-only
        apimock mock sms --latest
    """
    from apimock.config import load_settings
    from apimock.controller import MockServerController

    settings = load_settings()
    controller = MockServerController(settings)
    controller.run(
        api,
        host=host if host is not None else settings.config.default_host,
        port=port if port is not None else settings.config.default_port,
        download_only=download_only,
        latest=latest,
    )
