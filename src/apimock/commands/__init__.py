"""Built-in CLI sub-commands for apimock.

* :mod:`~apimock.commands.mock` -- download a spec and run a mock server.
* :mod:`~apimock.commands.apis` -- list mockable APIs and their cache status.
* :mod:`~apimock.commands.config` -- view and modify ``config.json``.

Each module exports either a plain callback registered on the root app
(``mock``, ``apis``) or a :class:`typer.Typer` sub-application (``config``).
"""
