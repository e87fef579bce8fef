"""Raw key input and the "press q to quit" wait.

A :class:`KeySource` yields single characters without echoing them.
:class:`TerminalKeySource` reads them from stdin, switching a TTY into
cbreak mode for the duration of the ``with`` block and restoring the
previous terminal attributes afterwards.

:class:`InteractiveSession` consumes a key source and a shared
:class:`~apimock.cancellation.CancellationToken`. It moves through
``LISTENING -> QUITTING -> DONE``: a ``q`` keypress fires the token itself,
an external fire (for example Prism crashing) is observed on the next poll,
and every other key is discarded.
"""

from __future__ import annotations

import enum
import logging
import os
import select
import sys
from types import TracebackType
from typing import IO, Optional, Protocol

from apimock.cancellation import CancellationToken
from apimock.models import QuitReason

logger = logging.getLogger(__name__)

QUIT_KEY = "q"
POLL_INTERVAL = 0.1


class KeySource(Protocol):
    """A context-managed stream of single keypresses."""

    def __enter__(self) -> "KeySource": ...

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None: ...

    def read_key(self, timeout: float) -> Optional[str]:
        """Return the next key, or ``None`` if none arrived within *timeout* seconds."""
        ...


class TerminalKeySource:
    """Reads keypresses from a file descriptor, normally stdin.

    On a TTY, input is switched to cbreak mode (no line buffering, no echo).
    On a pipe or file, characters are read as they arrive; after EOF the
    source just sleeps out each timeout so the caller keeps waiting on its
    cancellation token instead of spinning. A stream without a usable file
    descriptor (closed or missing stdin) is treated as already at EOF.
    """

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._fd: Optional[int] = None
        self._saved_attrs: Optional[list] = None
        self._eof = False

    def __enter__(self) -> "TerminalKeySource":
        try:
            self._fd = self._stream.fileno()
        except (AttributeError, ValueError, OSError):
            # Closed or absent stdin (e.g. a detached launch): no keys will ever arrive.
            logger.debug("Key input has no file descriptor; waiting for cancellation only")
            self._fd = -1
            self._eof = True
            return self
        if os.isatty(self._fd):
            import termios
            import tty

            self._saved_attrs = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._saved_attrs is not None and self._fd is not None:
            import termios

            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

    def read_key(self, timeout: float) -> Optional[str]:
        if self._fd is None:
            raise RuntimeError("TerminalKeySource must be used as a context manager")
        if self._eof:
            select.select([], [], [], timeout)
            return None
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(self._fd, 1)
        if not data:
            logger.debug("Key input reached EOF; waiting for cancellation only")
            self._eof = True
            return None
        return data.decode("utf-8", errors="replace")


class SessionState(str, enum.Enum):
    LISTENING = "listening"
    QUITTING = "quitting"
    DONE = "done"


class InteractiveSession:
    """Blocks until the operator presses ``q`` or the session is cancelled elsewhere.

    Args:
        keys: Source of raw keypresses. Defaults to :class:`TerminalKeySource`
            on stdin.
        poll_interval: Upper bound, in seconds, on how long an external
            cancellation can go unnoticed.
    """

    def __init__(self, keys: Optional[KeySource] = None, poll_interval: float = POLL_INTERVAL) -> None:
        self._keys = keys if keys is not None else TerminalKeySource()
        self._poll_interval = poll_interval
        self.state = SessionState.LISTENING

    def wait_for_quit(self, abort: CancellationToken) -> QuitReason:
        """Wait for a quit key or for *abort* to fire.

        On ``q`` the session fires *abort* with ``OPERATOR`` itself. Ctrl-C
        while waiting fires it with ``INTERRUPTED``. In every case the
        returned reason is whichever fire happened first.
        """
        self.state = SessionState.LISTENING
        try:
            with self._keys as keys:
                while not abort.is_set():
                    key = keys.read_key(self._poll_interval)
                    if key == QUIT_KEY:
                        abort.fire(QuitReason.OPERATOR)
        except KeyboardInterrupt:
            abort.fire(QuitReason.INTERRUPTED)
        self.state = SessionState.QUITTING

        reason = abort.reason
        assert reason is not None  # loop only exits once the token is set
        logger.debug("Quit wait finished: %s", reason.value)
        self.state = SessionState.DONE
        return reason
