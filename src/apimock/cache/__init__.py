"""On-disk OpenAPI spec caching for apimock.

This package provides :class:`SpecCache`, which resolves an API name to a
spec file under ``<config_dir>/mock/``, downloading it with :mod:`httpx`
when it is missing or when a refresh is forced. The filesystem is the only
cache: nothing is held in memory between runs.

The cache is consumed by :class:`~apimock.controller.MockServerController`
and by the ``apis`` command, which reports cache status per API.
"""

from apimock.cache.spec_cache import SpecCache

__all__ = ["SpecCache"]
