"""Lifecycle management for the Prism mock-server subprocess.

:class:`ProcessSupervisor` launches Prism against a cached spec and later
stops it. Launching is fire-and-forget: :meth:`ProcessSupervisor.start`
returns as soon as the process exists, without waiting for the server to
accept connections. Prism's stdout and stderr are inherited so its request
log stays visible; its stdin is piped and otherwise unused.

A daemon watcher thread waits on each child. If the child exits before a
stop was requested, the watcher fires the session's
:class:`~apimock.cancellation.CancellationToken` with
:attr:`~apimock.models.QuitReason.PROCESS_EXITED`, which wakes the quit
wait and routes the crash through the normal shutdown path. Crashes are
never retried.

Stopping escalates once: ``SIGTERM``, then a bounded wait of
``grace_period_seconds``, then ``SIGKILL`` only if the child is still alive.
The wait is owned by :meth:`ProcessSupervisor.stop`; when it returns the
grace timer has either run out or been cut short by the child exiting.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from apimock.cancellation import CancellationToken
from apimock.exceptions import SpawnError
from apimock.models import QuitReason, Settings

logger = logging.getLogger(__name__)


@dataclass
class ServerSession:
    """A running (or stopped) mock-server process and where it is bound.

    Owned by a single caller for its lifetime. ``stopping`` is set as soon
    as :meth:`ProcessSupervisor.stop` begins, ``stopped`` once the process
    is confirmed gone.
    """

    process: Any
    host: str
    port: int
    spec_path: Path
    command: list[str]
    stopping: bool = False
    stopped: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def pid(self) -> Optional[int]:
        return getattr(self.process, "pid", None)

    def is_running(self) -> bool:
        """True while the process has not been observed to exit."""
        return self.process.poll() is None


class ProcessSupervisor:
    """Starts and stops Prism mock-server processes.

    Args:
        settings: Injected settings; ``prism_command`` and
            ``grace_period_seconds`` come from ``settings.config``.
        popen: Factory used to spawn the process. Defaults to
            :class:`subprocess.Popen`; tests pass a fake.
        which: Executable lookup. Defaults to :func:`shutil.which`.
    """

    def __init__(
        self,
        settings: Settings,
        popen: Callable[..., Any] = subprocess.Popen,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self._settings = settings
        self._popen = popen
        self._which = which

    @property
    def grace_period(self) -> float:
        return self._settings.config.grace_period_seconds

    def executable(self) -> list[str]:
        """Return the Prism command prefix, resolving the binary on ``PATH``.

        An unresolvable name is returned unchanged so that launching it
        fails with :class:`~apimock.exceptions.SpawnError`.

        Raises:
            SpawnError: If ``prism_command`` is empty.
        """
        command = list(self._settings.config.prism_command)
        if not command:
            raise SpawnError("No Prism command configured; set prism_command in config.json")
        binary = command[0]
        if not Path(binary).is_absolute():
            resolved = self._which(binary)
            if resolved:
                command[0] = resolved
        return command

    def build_command(self, spec_path: Path, host: str, port: int) -> list[str]:
        """Full argv: the Prism executable followed by ``mock <spec> --port <port> --host <host>``."""
        return self.executable() + ["mock", str(spec_path), "--port", str(port), "--host", host]

    def start(
        self,
        spec_path: Path,
        host: str,
        port: int,
        fault: Optional[CancellationToken] = None,
    ) -> ServerSession:
        """Launch Prism against *spec_path* and return the running session.

        Args:
            spec_path: Local OpenAPI document to serve.
            host: Interface to bind.
            port: Port to bind.
            fault: Token fired with ``PROCESS_EXITED`` if the child dies
                before :meth:`stop` is called. When omitted, unexpected
                exits are only logged.

        Raises:
            SpawnError: If the executable is missing, not executable, or
                cannot be started for any other OS-level reason.
        """
        command = self.build_command(spec_path, host, port)
        logger.debug("Launching %s", " ".join(command))
        try:
            process = self._popen(
                command,
                stdin=subprocess.PIPE,
                stdout=None,
                stderr=None,
            )
        except FileNotFoundError as exc:
            raise SpawnError(f"Failed to start Prism: executable not found: {command[0]}") from exc
        except PermissionError as exc:
            raise SpawnError(f"Failed to start Prism: permission denied: {command[0]}") from exc
        except OSError as exc:
            raise SpawnError(f"Failed to start Prism: {exc}") from exc

        session = ServerSession(
            process=process,
            host=host,
            port=port,
            spec_path=Path(spec_path),
            command=command,
        )
        watcher = threading.Thread(
            target=self._watch,
            args=(session, fault),
            name=f"apimock-watch-{session.pid}",
            daemon=True,
        )
        watcher.start()
        return session

    def stop(self, session: ServerSession) -> None:
        """Terminate the session's process, escalating to a kill after the grace period.

        Never raises. A second call, or a call while another stop is in
        progress, sends no further signals.
        """
        with session._lock:
            if session.stopping or session.stopped:
                logger.debug("Stop requested for pid %s again; ignoring", session.pid)
                return
            session.stopping = True

        process = session.process
        self._close_stdin(process)

        if process.poll() is not None:
            logger.debug("pid %s already exited with %s", session.pid, process.returncode)
            session.stopped = True
            return

        try:
            process.terminate()
        except OSError as exc:
            # The process may have exited between poll() and terminate().
            logger.debug("SIGTERM to pid %s failed: %s", session.pid, exc)

        try:
            process.wait(timeout=self.grace_period)
        except subprocess.TimeoutExpired:
            logger.warning(
                "Mock server (pid %s) still running after %.1fs; sending SIGKILL",
                session.pid,
                self.grace_period,
            )
            self._kill(session)
        session.stopped = True

    def _kill(self, session: ServerSession) -> None:
        process = session.process
        try:
            process.kill()
        except OSError as exc:
            logger.debug("SIGKILL to pid %s failed: %s", session.pid, exc)
            return
        try:
            process.wait(timeout=self.grace_period)
        except subprocess.TimeoutExpired:
            logger.error("pid %s did not exit after SIGKILL", session.pid)

    def _watch(self, session: ServerSession, fault: Optional[CancellationToken]) -> None:
        returncode = session.process.wait()
        if session.stopping:
            logger.debug("pid %s exited with %s after stop", session.pid, returncode)
            return
        logger.debug("pid %s exited unexpectedly with code %s", session.pid, returncode)
        if fault is not None:
            fault.fire(QuitReason.PROCESS_EXITED)

    @staticmethod
    def _close_stdin(process: Any) -> None:
        stdin = getattr(process, "stdin", None)
        if stdin is None:
            return
        try:
            stdin.close()
        except OSError:
            pass
