"""Canonical models shared across all apimock modules.

**Enumerations**:
    :class:`ApiName` -- the closed set of APIs that can be mocked.
    :class:`QuitReason` -- why an interactive mock session ended.

**Configuration models** -- serialised as JSON in the config directory:
    :class:`MockConfig`, plus the injected :class:`Settings` struct that
    pairs a loaded config with the directory it was read from.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from pathlib import Path

from pydantic import BaseModel, Field


class ApiName(str, enum.Enum):
    """APIs with a registered OpenAPI spec source.

    Each member has exactly one URL in :data:`apimock.registry.API_SPECS`.
    """

    SMS = "sms"


class QuitReason(str, enum.Enum):
    """Why the interactive wait returned.

    All reasons lead to the same shutdown sequence; the distinction is kept
    for diagnostics only.
    """

    OPERATOR = "operator"
    PROCESS_EXITED = "process_exited"
    INTERRUPTED = "interrupted"


class MockConfig(BaseModel):
    """User-editable settings persisted as ``<config_dir>/config.json``.

    Example::

        MockConfig(prism_command=["npx", "@stoplight/prism-cli"], grace_period_seconds=3)
    """

    prism_command: list[str] = Field(
        default_factory=lambda: ["prism"],
        min_length=1,
        description="Executable (and leading arguments) used to launch Prism",
    )
    grace_period_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait after SIGTERM before sending SIGKILL",
    )
    settle_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Seconds to let the mock server start before announcing it",
    )
    download_timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP timeout for spec downloads"
    )
    default_host: str = Field(default="localhost", description="Default bind host")
    default_port: int = Field(default=4010, ge=1, le=65535, description="Default port")


class Settings(BaseModel):
    """Explicitly injected configuration for the spec cache and supervisor.

    Built once by :func:`apimock.config.load_settings` and passed down, so
    no component looks up the home directory or environment on its own.
    """

    config_dir: Path
    config: MockConfig = Field(default_factory=MockConfig)

    @property
    def mock_dir(self) -> Path:
        """Directory holding the cached spec files."""
        return self.config_dir / "mock"
