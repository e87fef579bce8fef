"""Shared test fixtures for apimock.

Provides isolated config directories, injected settings with short
timings, a recording :class:`httpx.MockTransport`, and fakes for the Prism
process and for raw key input. No test touches the real network, the real
terminal, or a real Prism binary.
"""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import httpx
import pytest

from apimock.models import MockConfig, Settings
from apimock.output import OutputFormat, OutputManager, reset_output, set_output

SMS_URL = "https://developer.vonage.com/api/v1/developer/api/file/sms?format=json&vendorId=vonage"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point apimock's config and data directories at *tmp_path*.

    Returns:
        The config directory (``tmp_path / "config"``).
    """
    config_dir = tmp_path / "config"
    monkeypatch.setenv("APIMOCK_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    return config_dir


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in *tmp_path* with timings short enough for tests."""
    return Settings(
        config_dir=tmp_path / "config",
        config=MockConfig(
            prism_command=["/opt/prism/bin/prism"],
            grace_period_seconds=0.2,
            settle_seconds=0,
        ),
    )


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


@pytest.fixture
def sms_spec() -> dict[str, Any]:
    return {
        "openapi": "3.0.0",
        "info": {"title": "SMS API", "version": "1.0.0"},
        "paths": {},
    }


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def make_client() -> Callable[..., tuple[httpx.Client, RecordingTransport]]:
    """Build an :class:`httpx.Client` backed by a :class:`RecordingTransport`."""
    clients: list[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        client = httpx.Client(transport=transport)
        clients.append(client)
        return client, transport

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def spec_client(make_client, sms_spec):
    """Client whose every GET returns *sms_spec* with status 200."""
    return make_client(lambda request: httpx.Response(200, json=sms_spec))


# ---------------------------------------------------------------------------
# Process fakes
# ---------------------------------------------------------------------------


class FakeProcess:
    """Stand-in for :class:`subprocess.Popen` that records signals.

    Args:
        exits_on_terminate: When False, SIGTERM is ignored and only
            SIGKILL ends the process.
    """

    def __init__(self, exits_on_terminate: bool = True, pid: int = 4242) -> None:
        self.exits_on_terminate = exits_on_terminate
        self.pid = pid
        self.returncode: Optional[int] = None
        self.signals: list[str] = []
        self.stdin = None
        self._exited = threading.Event()

    def poll(self) -> Optional[int]:
        return self.returncode

    def terminate(self) -> None:
        self.signals.append("SIGTERM")
        if self.exits_on_terminate:
            self.exit(-15)

    def kill(self) -> None:
        self.signals.append("SIGKILL")
        self.exit(-9)

    def wait(self, timeout: Optional[float] = None) -> int:
        if not self._exited.wait(timeout):
            raise subprocess.TimeoutExpired("prism", timeout)
        assert self.returncode is not None
        return self.returncode

    def exit(self, code: int) -> None:
        if self.returncode is None:
            self.returncode = code
            self._exited.set()


class FakePopen:
    """Callable replacing ``subprocess.Popen``; records argv and kwargs."""

    def __init__(self, process: Optional[FakeProcess] = None, error: Optional[OSError] = None) -> None:
        self.process = process or FakeProcess()
        self.error = error
        self.calls: list[tuple[list[str], dict[str, Any]]] = []

    def __call__(self, args: list[str], **kwargs: Any) -> FakeProcess:
        self.calls.append((list(args), kwargs))
        if self.error is not None:
            raise self.error
        return self.process


@pytest.fixture
def fake_popen() -> FakePopen:
    return FakePopen()


# ---------------------------------------------------------------------------
# Key input fake
# ---------------------------------------------------------------------------


class ScriptedKeySource:
    """Key source that replays a fixed sequence, then reports no more input.

    Args:
        keys: Keys returned one per ``read_key`` call. ``None`` entries
            simulate a poll timeout.
        on_read: Optional hook called with the read count before each read.
    """

    def __init__(
        self,
        keys: Iterable[Optional[str]] = (),
        on_read: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._keys = list(keys)
        self._on_read = on_read
        self.reads = 0
        self.entered = False
        self.exited = False

    def __enter__(self) -> "ScriptedKeySource":
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    def read_key(self, timeout: float) -> Optional[str]:
        self.reads += 1
        if self._on_read is not None:
            self._on_read(self.reads)
        if self._keys:
            return self._keys.pop(0)
        return None
