"""End-to-end orchestration of a mock-server run.

:class:`MockServerController` composes the spec cache, the process
supervisor, and the interactive quit wait::

    validate API -> resolve spec -> [download-only: stop here]
        -> start Prism -> settle -> wait for quit -> stop Prism

Failures before the interactive phase (unknown API, cache directory,
download, spawn) abort the run with nothing to clean up. Once Prism is
running, :meth:`ProcessSupervisor.stop` is called exactly once on every
exit path, including exceptions raised during the wait.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from apimock.cache import SpecCache
from apimock.cancellation import CancellationToken
from apimock.exceptions import SpawnError
from apimock.interactive import InteractiveSession
from apimock.models import QuitReason, Settings
from apimock.output import info, newline, prompt, success, suggest, warning
from apimock.registry import validate_api
from apimock.supervisor import ProcessSupervisor

logger = logging.getLogger(__name__)


class MockServerController:
    """Runs one mock-server session from spec resolution to shutdown.

    Args:
        settings: Injected settings (cache location, Prism command, timings).
        cache: Spec cache. Built from *settings* when omitted.
        supervisor: Process supervisor. Built from *settings* when omitted.
        session_factory: Returns the :class:`InteractiveSession` used for the
            quit wait. Defaults to one reading from stdin.
    """

    def __init__(
        self,
        settings: Settings,
        cache: Optional[SpecCache] = None,
        supervisor: Optional[ProcessSupervisor] = None,
        session_factory: Optional[Callable[[], InteractiveSession]] = None,
    ) -> None:
        self._settings = settings
        self._cache = cache if cache is not None else SpecCache(settings)
        self._supervisor = supervisor if supervisor is not None else ProcessSupervisor(settings)
        self._session_factory = session_factory if session_factory is not None else InteractiveSession

    def download(self, api: str, latest: bool = False) -> Path:
        """Resolve the spec for *api* without starting a server."""
        name = validate_api(api)
        was_cached = self._cache.is_cached(name)
        path = self._cache.resolve(name, force_refresh=latest)
        if was_cached and not latest:
            info("Spec already exists. Use --latest to re-download the latest version.")
            info(f"Spec location: {path}")
        else:
            info("Spec download complete. Use the spec file with your preferred mock server.")
            info(f"Spec saved to: {path}")
        return path

    def run(
        self,
        api: str,
        host: str,
        port: int,
        download_only: bool = False,
        latest: bool = False,
    ) -> Optional[QuitReason]:
        """Serve *api* until the operator quits.

        Returns:
            The :class:`QuitReason` that ended the session, or ``None`` in
            download-only mode.

        Raises:
            UnsupportedApiError, DirectoryError, DownloadError, SpawnError:
                Propagated unchanged; none of them leave a process behind.
        """
        name = validate_api(api)
        label = name.value.upper()
        info(f"Setting up mock server for {label} API")

        if download_only:
            self.download(name.value, latest=latest)
            return None

        spec_path = self._cache.resolve(name, force_refresh=latest)

        newline()
        info(f"Starting mock server for {label} API")
        info(f"   Host: {host}")
        info(f"   Port: {port}")
        info(f"   Spec: {spec_path}")
        newline()

        token = CancellationToken()
        try:
            server = self._supervisor.start(spec_path, host, port, fault=token)
        except SpawnError:
            newline()
            suggest("If you encounter issues, you can also run Prism manually:")
            suggest(f"npx @stoplight/prism-cli mock {spec_path} --port {port} --host {host}")
            raise

        try:
            # Prism gives no readiness signal; allow it a moment, unless it dies first.
            if not token.wait(self._settings.config.settle_seconds):
                success(f"Mock server is running at {server.url}")
                newline()
                info("Available endpoints are generated from the OpenAPI spec.")
                info("Check the Prism output above for specific endpoint details.")
                newline()
                prompt("Press q to quit")

            reason = self._session_factory().wait_for_quit(token)
            newline()
            if reason is QuitReason.PROCESS_EXITED:
                warning("Mock server exited unexpectedly.")
            logger.debug("Session ended: %s", reason.value)
            return reason
        except Exception:
            logger.exception("Unexpected error while waiting for quit")
            raise
        finally:
            newline()
            info("Shutting down mock server...")
            self._supervisor.stop(server)
            info("Mock server stopped.")
