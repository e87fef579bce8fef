"""Disk-based cache of downloaded OpenAPI specifications.

Each registered API owns exactly one file at a deterministic path::

    <config_dir>/mock/<api>-spec.json

Whether a run touches the network is decided from two inputs only: does
that file exist, and was a refresh forced (``--latest``). A cache hit
performs no network access and no writes. A miss or a forced refresh
performs exactly one ``GET`` and rewrites the file as pretty-printed JSON
(2-space indentation) via an atomic rename. Files are never deleted here.

See Also:
    :data:`~apimock.registry.API_SPECS` -- the static API-to-URL mapping.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from apimock.config import atomic_write
from apimock.exceptions import DirectoryError, DownloadError
from apimock.models import ApiName, Settings
from apimock.output import info, status, success
from apimock.registry import API_SPECS, validate_api

logger = logging.getLogger(__name__)


class SpecCache:
    """Resolves API names to local spec files, downloading on demand.

    Args:
        settings: Injected settings; ``settings.mock_dir`` is the cache root
            and ``settings.config.download_timeout_seconds`` bounds each fetch.
        client: Optional :class:`httpx.Client` used for downloads. When
            omitted a short-lived client is created per download.

    Example::

        from apimock.cache import SpecCache
        from apimock.config import load_settings

        cache = SpecCache(load_settings())
        path = cache.resolve("sms")                      # cached if present
        path = cache.resolve("sms", force_refresh=True)  # always re-download
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def directory(self) -> Path:
        """The directory holding cached spec files."""
        return self._settings.mock_dir

    def spec_path(self, api: str | ApiName) -> Path:
        """Return the deterministic spec path for *api* (no I/O)."""
        return self.directory / f"{validate_api(api).value}-spec.json"

    def is_cached(self, api: str | ApiName) -> bool:
        return self.spec_path(api).is_file()

    def resolve(self, api: str | ApiName, force_refresh: bool = False) -> Path:
        """Return a local path to the spec for *api*, downloading it if needed.

        Args:
            api: Registered API name.
            force_refresh: Re-download even when a cached file exists.

        Returns:
            Path to the spec file on disk.

        Raises:
            UnsupportedApiError: If *api* is not registered. Raised before
                any filesystem or network access.
            DirectoryError: If the cache directory or spec file cannot be written.
            DownloadError: On a non-2xx response, a transport failure, or a
                body that is not valid JSON.
        """
        name = validate_api(api)
        label = name.value.upper()

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryError(
                f"Failed to create mock directory {self.directory}: {exc.strerror or exc}"
            ) from exc

        path = self.spec_path(name)
        if path.is_file() and not force_refresh:
            info(f"Using cached {label} API specification: {path}")
            return path

        message = (
            f"Re-downloading latest {label} API specification"
            if force_refresh
            else f"Downloading {label} API specification"
        )
        with status(message):
            document = self._download(API_SPECS[name])
            self._write(path, document)

        action = "Re-downloaded" if force_refresh else "Downloaded"
        success(f"{action} {label} API specification to {path}")
        return path

    def _download(self, url: str) -> Any:
        """Fetch and decode the JSON document at *url*."""
        logger.debug("GET %s", url)
        try:
            if self._client is not None:
                response = self._client.get(url)
            else:
                response = httpx.get(
                    url,
                    timeout=self._settings.config.download_timeout_seconds,
                    follow_redirects=True,
                )
        except httpx.HTTPError as exc:
            raise DownloadError(f"Failed to download API specification: {exc}") from exc

        if not response.is_success:
            raise DownloadError(
                f"Failed to download API specification: "
                f"{response.status_code} {response.reason_phrase}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise DownloadError(
                f"Failed to download API specification: response from {url} is not valid JSON"
            ) from exc

    def _write(self, path: Path, document: Any) -> None:
        try:
            atomic_write(path, json.dumps(document, indent=2, ensure_ascii=False))
        except OSError as exc:
            raise DirectoryError(f"Failed to write spec file {path}: {exc.strerror or exc}") from exc
        logger.debug("Wrote %s", path)
