"""Test doubles shared across the suite."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import requests

from portfolio_stats.clients.github import GitHubRepo, GitHubUser

TODAY = date(2026, 1, 15)


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(payload: Any = None, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    return response


def routed_session(routes: Dict[str, Any]) -> MagicMock:
    """Session whose ``request`` answers by the first route key contained in the URL.

    A route value may be a payload, a ``(payload, status)`` tuple, or an
    exception instance to raise.
    """
    session = MagicMock()

    def request(method: str, url: str, **kwargs: Any) -> MagicMock:
        for fragment, answer in routes.items():
            if fragment in url:
                if isinstance(answer, Exception):
                    raise answer
                if isinstance(answer, tuple):
                    return make_response(*answer)
                return make_response(answer)
        raise AssertionError(f"unexpected request {method} {url}")

    session.request.side_effect = request
    return session


def make_repo(
    name: str,
    stars: int = 0,
    forks: int = 0,
    watchers: int = 0,
    language: Optional[str] = "TypeScript",
    fork: bool = False,
) -> GitHubRepo:
    return GitHubRepo(
        name=name,
        stars=stars,
        forks=forks,
        watchers=watchers,
        language=language,
        fork=fork,
        pushed_at="2026-01-10T00:00:00Z",
        url=f"https://github.com/ofri-peretz/{name}",
        description=None,
    )


def make_user(followers: int = 40, following: int = 12, public_repos: int = 30) -> GitHubUser:
    return GitHubUser(
        followers=followers,
        following=following,
        public_repos=public_repos,
        created_at="2017-01-01T00:00:00Z",
    )
