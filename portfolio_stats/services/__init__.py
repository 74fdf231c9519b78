"""
Stats services and their per-process wiring
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Type

from fastapi import Request

from portfolio_stats.cache import CacheStore
from portfolio_stats.clients import DevToClient, GitHubClient, NpmClient
from portfolio_stats.config import Config
from portfolio_stats.services.devto import DevToStatsService
from portfolio_stats.services.github import GitHubStatsService
from portfolio_stats.services.history import HistoryReader, SeedConfig
from portfolio_stats.services.homepage import HomepageStatsService
from portfolio_stats.services.npm import NpmStatsService


@dataclass
class Services:
    cache: CacheStore
    github: GitHubStatsService
    npm: NpmStatsService
    devto: DevToStatsService
    homepage: HomepageStatsService
    history: HistoryReader


def build_services(config: Type[Config] = Config, cache: CacheStore | None = None) -> Services:
    """Create one cache and every service around it."""
    cache = cache or CacheStore()

    github = GitHubStatsService(
        GitHubClient(config.GITHUB_USERNAME, token=config.GITHUB_TOKEN),
        cache,
        tracked=config.GITHUB_TRACKED_REPOS,
    )
    npm = NpmStatsService(
        NpmClient(),
        cache,
        maintainer=config.NPM_MAINTAINER,
        excluded=config.NPM_EXCLUDED_PACKAGES,
        excluded_prefixes=config.NPM_EXCLUDED_PREFIXES,
        window_days=config.NPM_DOWNLOAD_WINDOW_DAYS,
    )
    devto = DevToStatsService(
        DevToClient(api_key=config.DEVTO_API_KEY), cache, username=config.DEVTO_USERNAME
    )
    seed = None
    if config.HISTORY_SEED_ENABLED:
        seed = SeedConfig(
            start=date.fromisoformat(config.MEASUREMENT_START_DATE),
            end=date.fromisoformat(config.SEED_END_DATE),
        )

    return Services(
        cache=cache,
        github=github,
        npm=npm,
        devto=devto,
        homepage=HomepageStatsService(github, npm, devto, cache),
        history=HistoryReader(cache, config.SNAPSHOTS_DIR, dev_mode=config.DEV_MODE, seed=seed),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the services created at startup."""
    return request.app.state.services
