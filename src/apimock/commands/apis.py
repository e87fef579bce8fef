"""Apis command -- list mockable APIs and whether their specs are cached."""

from __future__ import annotations

from apimock.output import info, print_table


def apis_command() -> None:
    """List registered APIs, their spec URLs, and local cache status.

    Example::

        apimock apis
        apimock --json apis
    """
    from apimock.cache import SpecCache
    from apimock.config import load_settings
    from apimock.registry import API_SPECS

    cache = SpecCache(load_settings())
    rows = []
    for api, url in sorted(API_SPECS.items(), key=lambda item: item[0].value):
        path = cache.spec_path(api)
        rows.append([api.value, "yes" if path.is_file() else "no", str(path), url])

    info(f"Spec cache: {cache.directory}")
    print_table(["api", "cached", "path", "url"], rows, title="Mockable APIs")
