"""
npm download statistics for the tracked maintainer

Daily series are fetched in two ranges so each can be cached for as long as
it stays valid: every day before today is final (HISTORICAL tier), while
today's count keeps moving (FRESH tier).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Callable, Iterable, List, Sequence, Tuple

from starlette.concurrency import run_in_threadpool

from portfolio_stats.cache import CacheStore, CacheTTL, date_range_key, is_historical_date, utc_today
from portfolio_stats.clients.npm import DailyDownloads, NpmClient
from portfolio_stats.config import Config
from portfolio_stats.errors import UpstreamError
from portfolio_stats.fallbacks import FALLBACK_NPM_STATS
from portfolio_stats.models import DownloadDay, NpmStats, NpmSummary, PackageStats
from portfolio_stats.services.base import SourceService

logger = logging.getLogger(__name__)

STATS_KEY = "npm:stats"
PACKAGES_KEY_PREFIX = "npm:packages"
DOWNLOADS_KEY_PREFIX = "npm:downloads"

TOP_PACKAGES = 6


def filter_excluded_packages(
    names: Iterable[str], excluded: Sequence[str], prefixes: Sequence[str]
) -> List[str]:
    """Drop excluded names and anything starting with an excluded prefix.

    Prefixes match literally (case-sensitive); order is preserved.
    """
    excluded_set = set(excluded)
    prefix_tuple = tuple(prefixes)
    return [
        name
        for name in names
        if name not in excluded_set and not (prefix_tuple and name.startswith(prefix_tuple))
    ]


def cache_policy_for_range(end: str, today: date) -> Tuple[str, int]:
    """Tier name and TTL for a download range ending on ``end``."""
    if is_historical_date(end, today):
        return "historical", CacheTTL.HISTORICAL
    return "fresh", CacheTTL.FRESH


def downloads_cache_key(package: str, start: str, end: str) -> str:
    return date_range_key(f"{DOWNLOADS_KEY_PREFIX}:{package}", start, end)


class NpmStatsService(SourceService):
    def __init__(
        self,
        client: NpmClient,
        cache: CacheStore,
        maintainer: str,
        excluded: Sequence[str] = (),
        excluded_prefixes: Sequence[str] = (),
        window_days: int = Config.NPM_DOWNLOAD_WINDOW_DAYS,
        today: Callable[[], date] = utc_today,
    ):
        super().__init__(cache)
        self._client = client
        self._maintainer = maintainer
        self._excluded = tuple(excluded)
        self._excluded_prefixes = tuple(excluded_prefixes)
        self._window_days = window_days
        self._today = today

    async def get_packages(self) -> List[str]:
        """Maintainer's packages minus exclusions. Raises :class:`UpstreamError`."""
        key = f"{PACKAGES_KEY_PREFIX}:{self._maintainer}"
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        names = await run_in_threadpool(self._client.search_packages, self._maintainer)
        packages = filter_excluded_packages(names, self._excluded, self._excluded_prefixes)
        if packages:
            self._cache.set(key, tuple(packages), CacheTTL.STANDARD)
        return packages

    async def get_daily_downloads(self, package: str) -> List[DownloadDay]:
        """Daily downloads over the window, oldest first."""
        today = self._today()
        start = (today - timedelta(days=self._window_days - 1)).isoformat()
        yesterday = (today - timedelta(days=1)).isoformat()
        today_str = today.isoformat()

        ranges = [(today_str, today_str)]
        if start <= yesterday:
            ranges.insert(0, (start, yesterday))

        parts = await asyncio.gather(*(self._range(package, s, e) for s, e in ranges))
        return [DownloadDay(day=d.day, downloads=d.downloads) for part in parts for d in part]

    async def _range(self, package: str, start: str, end: str) -> Tuple[DailyDownloads, ...]:
        key = downloads_cache_key(package, start, end)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        try:
            days = await run_in_threadpool(self._client.fetch_downloads, package, start, end)
        except UpstreamError as e:
            logger.warning("Failed to fetch downloads for %s (%s..%s): %s", package, start, end, e)
            return ()
        _, ttl = cache_policy_for_range(end, self._today())
        result = tuple(days)
        self._cache.set(key, result, ttl)
        return result

    async def get_stats(self) -> NpmStats:
        """Per-package downloads and totals; never raises for upstream failures."""
        cached = self._from_cache(STATS_KEY)
        if cached is not None:
            return cached

        try:
            packages = await self.get_packages()
        except UpstreamError as e:
            logger.error("Failed to fetch npm package list: %s", e)
            return self._degraded(STATS_KEY, FALLBACK_NPM_STATS)

        if not packages:
            logger.warning("No packages found for maintainer %s, returning fallback", self._maintainer)
            return self._degraded(STATS_KEY, FALLBACK_NPM_STATS)

        series = await asyncio.gather(*(self.get_daily_downloads(p) for p in packages))
        ranked = sorted(
            (
                PackageStats(name=name, downloads=sum(d.downloads for d in days), daily_data=days)
                for name, days in zip(packages, series)
            ),
            key=lambda p: p.downloads,
            reverse=True,
        )
        total = sum(p.downloads for p in ranked)

        # An all-zero total is read as a failed fetch, even though a brand-new
        # maintainer could legitimately have no downloads yet.
        if total == 0:
            logger.warning("All packages returned 0 downloads, using fallback")
            return self._degraded(STATS_KEY, FALLBACK_NPM_STATS)

        result = NpmStats(
            packages=ranked,
            top_packages=ranked[:TOP_PACKAGES],
            total_downloads=total,
            package_count=len(packages),
            source="api",
        )
        logger.info("npm stats fetched: packages=%d downloads=%d", len(packages), total)
        return self._store(STATS_KEY, result, CacheTTL.FRESH)

    async def get_summary(self) -> NpmSummary:
        stats = await self.get_stats()
        return NpmSummary(
            total_downloads=stats.total_downloads,
            package_count=stats.package_count,
            source=stats.source,
        )
