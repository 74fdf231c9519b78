"""Cache handling shared by the per-source services."""

from __future__ import annotations

import logging
from typing import Optional, TypeVar

from pydantic import BaseModel

from portfolio_stats.cache import CacheStore, CacheTTL

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

LAST_GOOD_SUFFIX = ":last-good"


class SourceService:
    """Base for services that serve one cached, source-tagged result.

    Besides the primary entry, every successful result is also kept under
    ``<key>:last-good`` for a day so an upstream outage serves the last
    known figures (tagged ``cache``) before falling back to constants.
    """

    def __init__(self, cache: CacheStore):
        self._cache = cache

    def _from_cache(self, key: str) -> Optional[M]:
        cached = self._cache.get(key)
        if cached is None:
            return None
        return cached.model_copy(update={"source": "cache"})

    def _store(self, key: str, value: M, ttl: float) -> M:
        self._cache.set(key, value, ttl)
        self._cache.set(key + LAST_GOOD_SUFFIX, value, CacheTTL.HISTORICAL)
        return value

    def _degraded(self, key: str, fallback: M) -> M:
        last_good = self._cache.get(key + LAST_GOOD_SUFFIX)
        if last_good is not None:
            logger.info("Serving last good value for %s", key)
            return last_good.model_copy(update={"source": "cache"})
        return fallback.model_copy(deep=True)
