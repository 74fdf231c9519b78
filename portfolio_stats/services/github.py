"""
GitHub statistics: profile, tracked repositories, contributions and activity
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from starlette.concurrency import run_in_threadpool

from portfolio_stats.cache import CacheStore, CacheTTL, utc_today
from portfolio_stats.clients.github import (
    SEARCH_KINDS,
    ContributionSummary,
    GitHubClient,
    GitHubEvent,
    GitHubRepo,
)
from portfolio_stats.errors import UpstreamError
from portfolio_stats.fallbacks import FALLBACK_GITHUB_STATS
from portfolio_stats.models import (
    ActivityBreakdown,
    ContributionDay,
    GitHubStats,
    GitHubSummary,
    LanguageCount,
    RecentEvent,
    RepoActivity,
    RepoSummary,
    StarsBreakdownItem,
)
from portfolio_stats.services.base import SourceService

logger = logging.getLogger(__name__)

STATS_KEY = "github:stats"
CONTRIBUTIONS_KEY = "github:contributions"
SEARCH_KEY_PREFIX = "github:search"

TOP_REPOS = 5
TOP_LANGUAGES = 6
CALENDAR_DAYS = 30
RECENT_EVENTS = 10


def tracked_repos(repos: Sequence[GitHubRepo], allow_list: Sequence[str]) -> List[GitHubRepo]:
    """Non-fork repositories whose name is on the allow-list."""
    allowed = set(allow_list)
    return [r for r in repos if not r.fork and r.name in allowed]


def top_repos(repos: Sequence[GitHubRepo], limit: int = TOP_REPOS) -> List[RepoSummary]:
    ranked = sorted(repos, key=lambda r: r.stars, reverse=True)[:limit]
    return [
        RepoSummary(
            name=r.name,
            stars=r.stars,
            forks=r.forks,
            url=r.url,
            description=r.description,
            language=r.language,
        )
        for r in ranked
    ]


def language_counts(repos: Sequence[GitHubRepo], limit: int = TOP_LANGUAGES) -> List[LanguageCount]:
    counts = Counter(r.language for r in repos if r.language)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [LanguageCount(name=name, count=count) for name, count in ranked]


def stars_breakdown(repos: Sequence[GitHubRepo]) -> List[StarsBreakdownItem]:
    return [StarsBreakdownItem(name=r.name, stars=r.stars, url=r.url) for r in repos]


def account_age_years(created_at: str, now: Optional[datetime] = None) -> int:
    if not created_at:
        return 0
    created = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    now = now or datetime.now(timezone.utc)
    return max(0, (now - created).days // 365)


def summarize_events(events: Sequence[GitHubEvent]) -> Tuple[ActivityBreakdown, List[RecentEvent]]:
    """Activity counts plus the most recent notable events from the public feed."""
    breakdown = ActivityBreakdown()
    recent: List[RecentEvent] = []

    def remember(kind: str, event: GitHubEvent, message: str) -> None:
        if len(recent) < RECENT_EVENTS:
            recent.append(RecentEvent(type=kind, repo=event.repo, date=event.created_at, message=message))

    for event in events:
        if event.type == "PushEvent":
            breakdown.commits += event.commit_count
            if event.commit_count > 0:
                plural = "s" if event.commit_count > 1 else ""
                remember("commit", event, f"{event.commit_count} commit{plural}")
        elif event.type == "PullRequestEvent":
            if event.action in ("opened", "closed"):
                breakdown.pull_requests += 1
                remember("pr", event, event.title or "Pull request")
        elif event.type == "PullRequestReviewEvent":
            breakdown.code_reviews += 1
            remember("review", event, f"Code review: {event.review_state or 'reviewed'}")
        elif event.type == "IssuesEvent":
            breakdown.issues += 1
            remember("issue", event, event.title or "Issue")
        elif event.type == "IssueCommentEvent":
            breakdown.issues += 1
    return breakdown, recent


class GitHubStatsService(SourceService):
    def __init__(
        self,
        client: GitHubClient,
        cache: CacheStore,
        tracked: Sequence[str],
        today: Callable[[], date] = utc_today,
    ):
        super().__init__(cache)
        self._client = client
        self._tracked = tuple(tracked)
        self._today = today

    async def get_stats(self) -> GitHubStats:
        """Full statistics; never raises for upstream failures."""
        cached = self._from_cache(STATS_KEY)
        if cached is not None:
            return cached

        try:
            user, repos, events, (contributions, authenticated), activity = await asyncio.gather(
                run_in_threadpool(self._client.fetch_user),
                run_in_threadpool(self._client.fetch_repos),
                self._events(),
                self._contributions(),
                self._repo_activity(),
            )
        except UpstreamError as e:
            logger.error("Failed to fetch GitHub stats, degrading: %s", e)
            return self._degraded(STATS_KEY, FALLBACK_GITHUB_STATS)

        own = [r for r in repos if not r.fork]
        tracked = tracked_repos(repos, self._tracked)
        breakdown, recent = summarize_events(events)

        result = GitHubStats(
            total_stars=sum(r.stars for r in tracked),
            total_forks=sum(r.forks for r in tracked),
            total_watchers=sum(r.watchers for r in tracked),
            total_repos=len(own),
            followers=user.followers,
            following=user.following,
            public_repos=user.public_repos,
            account_age_years=account_age_years(user.created_at),
            total_contributions=contributions.total_contributions,
            recent_commits=contributions.commits,
            recent_prs=contributions.pull_requests,
            recent_issues=contributions.issues,
            recent_repos=contributions.repositories,
            recent_reviews=breakdown.code_reviews,
            contribution_calendar=[
                ContributionDay(date=day, count=count)
                for day, count in contributions.calendar[-CALENDAR_DAYS:]
            ],
            repo_activity=activity,
            activity_breakdown=breakdown,
            recent_events=recent,
            top_repos=top_repos(tracked),
            languages=language_counts(tracked),
            stars_breakdown=stars_breakdown(tracked),
            authenticated=authenticated,
            source="api",
        )
        logger.info(
            "GitHub stats fetched: stars=%d followers=%d authenticated=%s",
            result.total_stars, result.followers, authenticated,
        )
        return self._store(STATS_KEY, result, CacheTTL.FRESH)

    async def get_summary(self) -> GitHubSummary:
        """Homepage block. Raises :class:`UpstreamError` when GitHub is unreachable."""
        if self._client.authenticated:
            try:
                batch = await run_in_threadpool(self._client.fetch_homepage_batch, self._tracked)
            except UpstreamError as e:
                logger.warning("GitHub GraphQL batch failed, using REST: %s", e)
            else:
                repos = list(batch.repos)
                return GitHubSummary(
                    total_stars=sum(r.stars for r in repos),
                    total_forks=sum(r.forks for r in repos),
                    total_repos=batch.total_repos,
                    followers=batch.followers,
                    recent_commits=batch.commits,
                    total_contributions=batch.total_contributions,
                    stars_breakdown=stars_breakdown(repos),
                    authenticated=True,
                    source="api",
                )

        user, repos = await asyncio.gather(
            run_in_threadpool(self._client.fetch_user),
            run_in_threadpool(self._client.fetch_repos),
        )
        tracked = tracked_repos(repos, self._tracked)
        # contribution counts need a token; 0 means unknown here
        return GitHubSummary(
            total_stars=sum(r.stars for r in tracked),
            total_forks=sum(r.forks for r in tracked),
            total_repos=len([r for r in repos if not r.fork]),
            followers=user.followers,
            recent_commits=0,
            total_contributions=0,
            stars_breakdown=stars_breakdown(tracked),
            authenticated=False,
            source="api",
        )

    async def _events(self) -> List[GitHubEvent]:
        try:
            return await run_in_threadpool(self._client.fetch_events)
        except UpstreamError as e:
            logger.warning("GitHub events unavailable: %s", e)
            return []

    async def _contributions(self) -> Tuple[ContributionSummary, bool]:
        fallback = ContributionSummary(
            total_contributions=FALLBACK_GITHUB_STATS.total_contributions,
            commits=FALLBACK_GITHUB_STATS.recent_commits,
            pull_requests=FALLBACK_GITHUB_STATS.recent_prs,
            issues=FALLBACK_GITHUB_STATS.recent_issues,
            repositories=FALLBACK_GITHUB_STATS.recent_repos,
        )
        if not self._client.authenticated:
            return fallback, False

        cached = self._cache.get(CONTRIBUTIONS_KEY)
        if cached is not None:
            return cached, True
        try:
            contributions = await run_in_threadpool(self._client.fetch_contributions)
        except UpstreamError as e:
            logger.error("GraphQL error, using fallback contribution stats: %s", e)
            return fallback, True
        self._cache.set(CONTRIBUTIONS_KEY, contributions, CacheTTL.STANDARD)
        return contributions, True

    async def _repo_activity(self) -> List[RepoActivity]:
        results = await asyncio.gather(*(self._search_repo(repo) for repo in self._tracked))
        return [activity for activity in results if activity is not None]

    async def _search_repo(self, repo: str) -> Optional[RepoActivity]:
        """Search tallies up to yesterday; they only change when the day rolls over."""
        today = self._today().isoformat()
        key = f"{SEARCH_KEY_PREFIX}:{repo}:{today}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        try:
            commits, prs, issues = await asyncio.gather(
                *(
                    run_in_threadpool(self._client.search_count, kind, repo, today)
                    for kind in SEARCH_KINDS
                )
            )
        except UpstreamError as e:
            logger.warning("Search tallies for %s unavailable: %s", repo, e)
            return None
        activity = RepoActivity(repo=repo, commits=commits, pull_requests=prs, issues=issues)
        self._cache.set(key, activity, CacheTTL.HISTORICAL)
        return activity
