"""
Unified homepage stats

Bundles the GitHub, npm and dev.to summaries into one response so the page
makes a single request. The three sources are fetched concurrently and
settle independently: a failing source is replaced by its own fallback block
while the others keep their live values.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from portfolio_stats.cache import CacheStore, CacheTTL
from portfolio_stats.fallbacks import FALLBACK_HOMEPAGE_STATS
from portfolio_stats.models import HomepageStats
from portfolio_stats.services.devto import DevToStatsService
from portfolio_stats.services.github import GitHubStatsService
from portfolio_stats.services.npm import NpmStatsService

logger = logging.getLogger(__name__)

HOMEPAGE_KEY = "homepage:unified-stats"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def with_display_fallbacks(stats: HomepageStats, fallback: HomepageStats = FALLBACK_HOMEPAGE_STATS) -> HomepageStats:
    """Replace a literal 0 in token-only GitHub counters with the fallback figure.

    Without a token the summary reports 0 contributions and commits, which
    means "unknown", not "no activity".
    """
    github = stats.github.model_copy(
        update={
            "total_contributions": stats.github.total_contributions
            or fallback.github.total_contributions,
            "recent_commits": stats.github.recent_commits or fallback.github.recent_commits,
        }
    )
    return stats.model_copy(update={"github": github})


class HomepageStatsService:
    def __init__(
        self,
        github: GitHubStatsService,
        npm: NpmStatsService,
        devto: DevToStatsService,
        cache: CacheStore,
        now: Callable[[], str] = utc_now_iso,
    ):
        self._github = github
        self._npm = npm
        self._devto = devto
        self._cache = cache
        self._now = now

    async def get_stats(self) -> HomepageStats:
        cached = self._cache.get(HOMEPAGE_KEY)
        if cached is not None:
            return cached.model_copy(update={"source": "cache"})

        github, npm, devto = await asyncio.gather(
            self._github.get_summary(),
            self._npm.get_summary(),
            self._devto.get_summary(),
            return_exceptions=True,
        )

        if isinstance(github, BaseException):
            logger.error("GitHub fetch failed for homepage stats: %s", github)
            github = FALLBACK_HOMEPAGE_STATS.github.model_copy(deep=True)
        if isinstance(npm, BaseException):
            logger.error("npm fetch failed for homepage stats: %s", npm)
            npm = FALLBACK_HOMEPAGE_STATS.npm.model_copy(deep=True)
        if isinstance(devto, BaseException):
            logger.error("dev.to fetch failed for homepage stats: %s", devto)
            devto = FALLBACK_HOMEPAGE_STATS.devto.model_copy(deep=True)

        result = HomepageStats(
            github=github,
            npm=npm,
            devto=devto,
            source="api",
            fetched_at=self._now(),
        )
        self._cache.set(HOMEPAGE_KEY, result, CacheTTL.FRESH)
        return result
