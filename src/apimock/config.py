"""Configuration management with XDG paths and atomic writes.

This module handles all persistent configuration for apimock:

* **Directory layout** -- ``$APIMOCK_CONFIG_DIR`` when set, otherwise XDG
  Base Directory compliant on Linux/BSD and ``~/.apimock/`` on macOS and
  Windows. See :func:`get_config_dir` and :func:`get_data_dir`.
* **Mock config** -- a single :class:`~apimock.models.MockConfig` JSON file
  storing the Prism command, shutdown grace period, and server defaults.
* **Settings** -- :func:`load_settings` bundles the resolved directory and
  the loaded config into the :class:`~apimock.models.Settings` struct that
  is injected into the spec cache and the process supervisor.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written spec or config.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from apimock.exceptions import ConfigError
from apimock.models import MockConfig, Settings

_APP_NAME = "apimock"
_CONFIG_FILENAME = "config.json"
_CONFIG_DIR_ENV = "APIMOCK_CONFIG_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory.

    ``$APIMOCK_CONFIG_DIR`` wins when set. Otherwise, on Linux/BSD:
    ``$XDG_CONFIG_HOME/apimock/`` (default ``~/.config/apimock/``); on
    macOS/Windows: ``~/.apimock/``.

    The directory is not created here. The spec cache creates its own
    ``mock/`` subdirectory and reports failures as
    :class:`~apimock.exceptions.DirectoryError`.
    """
    override = os.environ.get(_CONFIG_DIR_ENV, "")
    if override:
        return Path(override).expanduser()
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apimock/`` (default ``~/.local/share/apimock/``).
    On macOS/Windows: ``~/.apimock/`` (crash logs go to its ``logs/`` subdirectory).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up and the original exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Mock config ---


def _config_path(config_dir: Optional[Path] = None) -> Path:
    return (config_dir or get_config_dir()) / _CONFIG_FILENAME


def load_config(config_dir: Optional[Path] = None) -> MockConfig:
    """Load the mock configuration.

    Args:
        config_dir: Directory to read from. Defaults to :func:`get_config_dir`.

    Returns:
        The deserialised :class:`~apimock.models.MockConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but is unreadable, contains invalid
            JSON, or fails Pydantic validation.
    """
    path = _config_path(config_dir)
    if not path.is_file():
        return MockConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return MockConfig.model_validate(data)
    except OSError as exc:
        raise ConfigError(f"Cannot read config at {path}: {exc}") from exc
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: MockConfig, config_dir: Optional[Path] = None) -> Path:
    """Persist the mock configuration atomically and return its path."""
    path = _config_path(config_dir)
    data = config.model_dump(mode="json")
    try:
        atomic_write(path, json.dumps(data, indent=2) + "\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write config at {path}: {exc}") from exc
    return path


def load_settings(config_dir: Optional[Path] = None) -> Settings:
    """Build the :class:`~apimock.models.Settings` injected into the core components."""
    resolved = config_dir or get_config_dir()
    return Settings(config_dir=resolved, config=load_config(resolved))
