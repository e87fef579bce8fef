"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apimock.exceptions.ApiMockError` subclass.
Shell wrappers can inspect the exit code to tell a download failure from a
missing Prism binary without parsing stderr.

Example::

    $ apimock mock sms
    $ echo $?
    5   # EXIT_SPAWN_FAILURE -- the mock server could not be launched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. an unknown API name)."""

EXIT_DIRECTORY_FAILURE = 3
"""The spec cache directory could not be created or written."""

EXIT_DOWNLOAD_FAILURE = 4
"""The OpenAPI spec could not be downloaded or was not valid JSON."""

EXIT_SPAWN_FAILURE = 5
"""The mock-server executable could not be launched."""

EXIT_INTERRUPTED = 130
"""The run was cancelled with Ctrl-C outside the interactive wait."""
