"""apimock -- Run local mock servers for OpenAPI-described APIs.

This package downloads the OpenAPI specification for a registered API, caches
it on disk, and supervises a `Prism <https://stoplight.io/open-source/prism>`_
mock-server subprocess against that document until the operator presses
``q``.

Typical workflow::

    apimock mock sms                  # download (or reuse) the spec and serve it
    apimock mock sms --latest         # force a fresh download first
    apimock mock sms --download-only  # only populate the spec cache

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models and enums shared across the package.
    config: Config directory resolution and persisted settings.
    registry: The closed set of mockable APIs and their spec URLs.
    cache: On-disk spec cache.
    supervisor: Mock-server subprocess lifecycle.
    interactive: Raw key input and the quit wait.
    controller: End-to-end orchestration of a mock session.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"
