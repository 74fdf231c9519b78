"""Tests for services/devto.py."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from portfolio_stats.clients.devto import DevToClient
from portfolio_stats.errors import CredentialMissing, UpstreamError
from portfolio_stats.fallbacks import FALLBACK_DEVTO_FOLLOWERS, FALLBACK_DEVTO_STATS
from portfolio_stats.models import DevToArticle
from portfolio_stats.services.devto import (
    DevToStatsService,
    build_stats,
    published_newest_first,
)


def make_article(article_id: int, views: int = 0, published_at="2026-01-01T00:00:00Z", **kwargs) -> DevToArticle:
    return DevToArticle(
        id=article_id,
        title=f"Article {article_id}",
        url=f"https://dev.to/ofri-peretz/article-{article_id}",
        published_at=published_at,
        page_views_count=views,
        positive_reactions_count=kwargs.get("reactions", 1),
        comments_count=kwargs.get("comments", 0),
        reading_time_minutes=kwargs.get("minutes", 5),
    )


MY_ARTICLES = [
    make_article(1, views=100, published_at="2026-01-02T00:00:00Z"),
    make_article(2, views=300, published_at="2026-01-05T00:00:00Z"),
    make_article(3, views=50, published_at=None),
]
PUBLIC_ARTICLES = [make_article(a.id, views=0, published_at=a.published_at) for a in MY_ARTICLES]


def make_client(authenticated: bool) -> MagicMock:
    client = MagicMock(spec=DevToClient)
    client.authenticated = authenticated
    client.fetch_public_articles.return_value = PUBLIC_ARTICLES
    client.fetch_my_articles.return_value = MY_ARTICLES
    client.fetch_followers.return_value = 12
    if not authenticated:
        client.fetch_my_articles.side_effect = CredentialMissing("devto", "no key")
        client.fetch_followers.side_effect = CredentialMissing("devto", "no key")
    return client


def make_service(client, cache) -> DevToStatsService:
    return DevToStatsService(client, cache, username="ofri-peretz")


class TestHelpers:
    def test_published_newest_first_drops_drafts(self):
        ordered = published_newest_first(MY_ARTICLES)
        assert [a.id for a in ordered] == [2, 1]

    def test_build_stats_totals(self):
        articles = [make_article(i, views=i * 10, reactions=2, comments=1, minutes=4) for i in range(1, 8)]
        stats = build_stats(articles, followers=9, authenticated=True, source="api")
        assert stats.total_views == 280
        assert stats.article_count == 7
        assert stats.total_reactions == 14
        assert stats.total_comments == 7
        assert stats.total_reading_minutes == 28
        assert [t.views for t in stats.top_articles] == [70, 60, 50, 40, 30]


class TestGetArticles:
    @pytest.mark.asyncio
    async def test_public_list_without_key(self, cache):
        response = await make_service(make_client(False), cache).get_articles()
        assert response.authenticated is False
        assert response.source == "api"
        assert [a.id for a in response.articles] == [2, 1]
        assert all(a.page_views_count == 0 for a in response.articles)

    @pytest.mark.asyncio
    async def test_key_includes_views(self, cache):
        response = await make_service(make_client(True), cache).get_articles()
        assert response.authenticated is True
        assert [a.page_views_count for a in response.articles] == [300, 100]

    @pytest.mark.asyncio
    async def test_rejected_key_falls_back_to_public(self, cache):
        client = make_client(True)
        client.fetch_my_articles.side_effect = UpstreamError("devto", "HTTP 401")
        response = await make_service(client, cache).get_articles()
        assert response.source == "fallback"
        assert response.authenticated is False
        assert [a.id for a in response.articles] == [2, 1]

    @pytest.mark.asyncio
    async def test_everything_down(self, cache):
        client = make_client(False)
        client.fetch_public_articles.side_effect = UpstreamError("devto", "timeout")
        response = await make_service(client, cache).get_articles()
        assert response.articles == []
        assert response.source == "fallback"

    @pytest.mark.asyncio
    async def test_cached_listing(self, cache):
        client = make_client(True)
        service = make_service(client, cache)
        await service.get_articles()
        second = await service.get_articles()
        assert second.source == "cache"
        assert client.fetch_my_articles.call_count == 1


class TestGetStats:
    @pytest.mark.asyncio
    async def test_without_key_views_zero_followers_constant(self, cache):
        stats = await make_service(make_client(False), cache).get_stats()
        assert stats.total_views == 0
        assert stats.followers == FALLBACK_DEVTO_FOLLOWERS == 85
        assert stats.article_count == 2
        assert stats.authenticated is False
        assert stats.source == "fallback"

    @pytest.mark.asyncio
    async def test_with_key_followers_from_list_length(self, cache):
        stats = await make_service(make_client(True), cache).get_stats()
        assert stats.followers == 12
        assert stats.total_views == 400
        assert stats.authenticated is True
        assert stats.source == "api"

    @pytest.mark.asyncio
    async def test_follower_failure_degrades(self, cache):
        client = make_client(True)
        client.fetch_followers.side_effect = UpstreamError("devto", "HTTP 500")
        stats = await make_service(client, cache).get_stats()
        assert stats.source == "fallback"
        assert stats.total_views == FALLBACK_DEVTO_STATS.total_views

    @pytest.mark.asyncio
    async def test_no_articles_at_all(self, cache):
        client = make_client(False)
        client.fetch_public_articles.return_value = []
        stats = await make_service(client, cache).get_stats()
        assert stats == FALLBACK_DEVTO_STATS

    @pytest.mark.asyncio
    async def test_summary_mirrors_stats(self, cache):
        summary = await make_service(make_client(True), cache).get_summary()
        assert summary.total_views == 400
        assert summary.followers == 12
        assert summary.article_count == 2
        assert summary.source == "api"


class TestGetCombined:
    @pytest.mark.asyncio
    async def test_authenticated(self, cache):
        client = make_client(True)
        combined = await make_service(client, cache).get_combined()
        assert combined.source == "api"
        assert combined.stats.followers == 12
        assert combined.stats.total_views == 400
        assert [a.id for a in combined.articles] == [2, 1]
        # stats reused the listing cached a moment earlier
        assert client.fetch_my_articles.call_count == 1

    @pytest.mark.asyncio
    async def test_without_key_uses_fallback_stats(self, cache):
        combined = await make_service(make_client(False), cache).get_combined()
        assert combined.source == "fallback"
        assert combined.stats.followers == 85
        assert combined.stats.total_views == 1834
        assert len(combined.articles) == 2

    @pytest.mark.asyncio
    async def test_cached_only_when_live(self, cache):
        service = make_service(make_client(False), cache)
        await service.get_combined()
        again = await service.get_combined()
        assert again.source == "fallback"
