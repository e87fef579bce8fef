"""Single-fire cancellation token shared by the quit wait and the process watcher.

Either source may fire it: the interactive session on a ``q`` keypress, or
the supervisor's watcher thread when Prism exits on its own. Only the first
fire counts; its :class:`~apimock.models.QuitReason` is kept and every later
fire is a no-op, so exactly one shutdown sequence follows.
"""

from __future__ import annotations

import threading
from typing import Optional

from apimock.models import QuitReason


class CancellationToken:
    """Thread-safe "shut down now" signal that can be fired at most once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._reason: Optional[QuitReason] = None

    def fire(self, reason: QuitReason) -> bool:
        """Fire the token with *reason*.

        Returns:
            ``True`` if this call fired the token, ``False`` if it had
            already been fired.
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            return True

    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[QuitReason]:
        """The reason passed to the first :meth:`fire`, or ``None``."""
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until fired or *timeout* elapses. Returns :meth:`is_set`."""
        return self._event.wait(timeout)
