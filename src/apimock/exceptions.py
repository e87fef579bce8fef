"""Exception hierarchy for apimock.

All exceptions inherit from :class:`ApiMockError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apimock.exit_codes`.
The top-level error handler in :func:`apimock.app.main` catches
``ApiMockError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Every error below is fatal to a run: it is reported once and the flow is
aborted without retry.

Subclass hierarchy::

    ApiMockError (exit 1)
    +-- UnsupportedApiError (exit 2)
    +-- DirectoryError      (exit 3)
    +-- DownloadError       (exit 4)
    +-- SpawnError          (exit 5)
    +-- ConfigError         (exit 1)
"""

from apimock.exit_codes import (
    EXIT_DIRECTORY_FAILURE,
    EXIT_DOWNLOAD_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPAWN_FAILURE,
)


class ApiMockError(Exception):
    """Base exception for all apimock errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UnsupportedApiError(ApiMockError):
    """Raised for an API name outside the registered set, before any I/O."""

    exit_code = EXIT_INVALID_USAGE


class DirectoryError(ApiMockError):
    """Raised when the spec cache directory or spec file cannot be written."""

    exit_code = EXIT_DIRECTORY_FAILURE


class DownloadError(ApiMockError):
    """Raised on a non-2xx response, a network fault, or a malformed JSON body."""

    exit_code = EXIT_DOWNLOAD_FAILURE


class SpawnError(ApiMockError):
    """Raised when the mock-server executable cannot be launched."""

    exit_code = EXIT_SPAWN_FAILURE


class ConfigError(ApiMockError):
    """Raised for an unreadable or invalid ``config.json``."""

    exit_code = EXIT_GENERIC_FAILURE
