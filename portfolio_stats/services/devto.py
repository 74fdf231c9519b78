"""
dev.to articles and engagement statistics
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from starlette.concurrency import run_in_threadpool

from portfolio_stats.cache import CacheStore, CacheTTL
from portfolio_stats.clients.devto import DevToClient
from portfolio_stats.errors import UpstreamError
from portfolio_stats.fallbacks import (
    FALLBACK_DEVTO_COMBINED_STATS,
    FALLBACK_DEVTO_FOLLOWERS,
    FALLBACK_DEVTO_STATS,
)
from portfolio_stats.models import (
    DevToArticle,
    DevToArticlesResponse,
    DevToCombinedResponse,
    DevToCombinedStats,
    DevToStats,
    DevToSummary,
    TopArticle,
)
from portfolio_stats.services.base import SourceService

logger = logging.getLogger(__name__)

ARTICLES_KEY = "devto:articles"
FOLLOWERS_KEY = "devto:followers"
STATS_KEY = "devto:stats"
COMBINED_KEY = "devto:combined"

TOP_ARTICLES = 5


def published_newest_first(articles: List[DevToArticle]) -> List[DevToArticle]:
    published = [a for a in articles if a.published_at]
    return sorted(published, key=lambda a: a.published_at, reverse=True)


def build_stats(articles: List[DevToArticle], followers: int, authenticated: bool, source: str) -> DevToStats:
    ranked = sorted(articles, key=lambda a: a.page_views_count, reverse=True)[:TOP_ARTICLES]
    return DevToStats(
        followers=followers,
        total_views=sum(a.page_views_count for a in articles),
        article_count=len(articles),
        total_reactions=sum(a.positive_reactions_count for a in articles),
        total_comments=sum(a.comments_count for a in articles),
        total_reading_minutes=sum(a.reading_time_minutes for a in articles),
        top_articles=[
            TopArticle(
                title=a.title,
                url=a.url,
                views=a.page_views_count,
                reactions=a.positive_reactions_count,
            )
            for a in ranked
        ],
        authenticated=authenticated,
        source=source,
    )


class DevToStatsService(SourceService):
    def __init__(self, client: DevToClient, cache: CacheStore, username: str):
        super().__init__(cache)
        self._client = client
        self._username = username

    async def _public_articles(self) -> List[DevToArticle]:
        articles = await run_in_threadpool(self._client.fetch_public_articles, self._username)
        return published_newest_first(articles)

    async def get_articles(self) -> DevToArticlesResponse:
        """Article list, with view counts when a key is configured."""
        cached = self._from_cache(ARTICLES_KEY)
        if cached is not None:
            return cached

        if not self._client.authenticated:
            logger.warning("No DEVTO_API_KEY configured, using public API")
            try:
                articles = await self._public_articles()
            except UpstreamError as e:
                logger.error("dev.to public API error: %s", e)
                return DevToArticlesResponse(articles=[], authenticated=False, source="fallback")
            result = DevToArticlesResponse(articles=articles, authenticated=False, source="api")
            self._cache.set(ARTICLES_KEY, result, CacheTTL.FRESH)
            return result

        try:
            articles = published_newest_first(
                await run_in_threadpool(self._client.fetch_my_articles)
            )
        except UpstreamError as e:
            logger.error("Failed to fetch dev.to articles with key, trying public API: %s", e)
            try:
                articles = await self._public_articles()
            except UpstreamError as public_error:
                logger.error("dev.to public API error: %s", public_error)
                articles = []
            return DevToArticlesResponse(articles=articles, authenticated=False, source="fallback")

        logger.info("Fetched %d dev.to articles with views", len(articles))
        result = DevToArticlesResponse(articles=articles, authenticated=True, source="api")
        self._cache.set(ARTICLES_KEY, result, CacheTTL.FRESH)
        return result

    async def _followers(self) -> int:
        cached = self._cache.get(FOLLOWERS_KEY)
        if cached is not None:
            return cached
        followers = await run_in_threadpool(self._client.fetch_followers)
        self._cache.set(FOLLOWERS_KEY, followers, CacheTTL.FRESH)
        return followers

    async def get_stats(self) -> DevToStats:
        """Followers and engagement totals; never raises for upstream failures."""
        cached = self._from_cache(STATS_KEY)
        if cached is not None:
            return cached

        if not self._client.authenticated:
            # views need the key, followers come from the constant
            response = await self.get_articles()
            if not response.articles:
                return self._degraded(STATS_KEY, FALLBACK_DEVTO_STATS)
            return build_stats(
                response.articles, FALLBACK_DEVTO_FOLLOWERS, authenticated=False, source="fallback"
            )

        try:
            response, followers = await asyncio.gather(self.get_articles(), self._followers())
        except UpstreamError as e:
            logger.error("Failed to fetch dev.to followers: %s", e)
            return self._degraded(STATS_KEY, FALLBACK_DEVTO_STATS)
        if response.source == "fallback":
            return self._degraded(STATS_KEY, FALLBACK_DEVTO_STATS)

        result = build_stats(response.articles, followers, authenticated=True, source="api")
        logger.info(
            "dev.to stats fetched: articles=%d views=%d followers=%d",
            result.article_count, result.total_views, followers,
        )
        return self._store(STATS_KEY, result, CacheTTL.FRESH)

    async def get_combined(self) -> DevToCombinedResponse:
        """Articles and headline stats in one response."""
        cached = self._from_cache(COMBINED_KEY)
        if cached is not None:
            return cached

        # articles first so get_stats reuses the cached listing
        articles = await self.get_articles()
        stats = await self.get_stats()

        if stats.source == "fallback":
            combined_stats = FALLBACK_DEVTO_COMBINED_STATS.model_copy()
        else:
            combined_stats = DevToCombinedStats(followers=stats.followers, total_views=stats.total_views)

        source = "fallback" if "fallback" in (articles.source, stats.source) else "api"
        result = DevToCombinedResponse(articles=articles.articles, stats=combined_stats, source=source)
        if source == "api":
            self._cache.set(COMBINED_KEY, result, CacheTTL.FRESH)
        return result

    async def get_summary(self) -> DevToSummary:
        stats = await self.get_stats()
        return DevToSummary(
            total_views=stats.total_views,
            followers=stats.followers,
            article_count=stats.article_count,
            total_reactions=stats.total_reactions,
            total_comments=stats.total_comments,
            total_reading_minutes=stats.total_reading_minutes,
            source=stats.source,
        )
