"""
GitHub REST + GraphQL client.

Maps GitHub's payloads onto small frozen records so nothing past this module
depends on GitHub field names. Public profile, repositories and events work
without a token; contribution data needs ``GITHUB_TOKEN``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from portfolio_stats.config import Config
from portfolio_stats.errors import CredentialMissing, UpstreamError
from portfolio_stats.utils import as_int, expect_dict, get_http_session, request_json

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
GRAPHQL_URL = "https://api.github.com/graphql"

SEARCH_KINDS = ("commits", "prs", "issues")


@dataclass(frozen=True)
class GitHubUser:
    followers: int
    following: int
    public_repos: int
    created_at: str


@dataclass(frozen=True)
class GitHubRepo:
    name: str
    stars: int
    forks: int
    watchers: int
    language: Optional[str]
    fork: bool
    pushed_at: str
    url: str
    description: Optional[str]


@dataclass(frozen=True)
class GitHubEvent:
    type: str
    repo: str
    created_at: str
    commit_count: int = 0
    action: Optional[str] = None
    title: Optional[str] = None
    review_state: Optional[str] = None


@dataclass(frozen=True)
class ContributionSummary:
    total_contributions: int
    commits: int
    pull_requests: int
    issues: int
    repositories: int
    calendar: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class HomepageBatch:
    followers: int
    total_repos: int
    commits: int
    total_contributions: int
    repos: Tuple[GitHubRepo, ...] = field(default_factory=tuple)


CONTRIBUTIONS_QUERY = """
query($login: String!) {
  user(login: $login) {
    contributionsCollection {
      totalCommitContributions
      totalPullRequestContributions
      totalIssueContributions
      totalRepositoryContributions
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""


def repo_alias(name: str) -> str:
    """GraphQL alias for a repository name (aliases cannot contain '-' or '.')."""
    return "repo_" + name.replace("-", "_").replace(".", "_")


def build_homepage_query(repos: Sequence[str]) -> str:
    """One query for profile counters, contributions and every tracked repository."""
    repo_queries = "\n".join(
        f"""
    {repo_alias(name)}: repository(owner: $login, name: "{name}") {{
      name
      stargazerCount
      forkCount
      url
    }}"""
        for name in repos
    )
    return f"""
query($login: String!) {{
  user(login: $login) {{
    followers {{ totalCount }}
    repositories(first: 1, privacy: PUBLIC) {{ totalCount }}
    contributionsCollection {{
      totalCommitContributions
      contributionCalendar {{ totalContributions }}
    }}
  }}{repo_queries}
}}
"""


class GitHubClient:
    UPSTREAM = "github"

    def __init__(
        self,
        username: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = Config.GITHUB_TIMEOUT,
        graphql_timeout: float = Config.GITHUB_GRAPHQL_TIMEOUT,
    ):
        self.username = username
        self._token = token
        self._session = session or get_http_session()
        self._timeout = timeout
        self._graphql_timeout = graphql_timeout

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return request_json(
            self._session,
            self.UPSTREAM,
            "GET",
            f"{API_BASE}{path}",
            params=params,
            headers=self._headers(),
            timeout=self._timeout,
        )

    def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        if not self._token:
            raise CredentialMissing(self.UPSTREAM, "GraphQL requires GITHUB_TOKEN")
        payload = request_json(
            self._session,
            self.UPSTREAM,
            "POST",
            GRAPHQL_URL,
            headers={**self._headers(), "Content-Type": "application/json"},
            json={"query": query, "variables": variables},
            timeout=self._graphql_timeout,
        )
        payload = expect_dict(payload, self.UPSTREAM, "GraphQL response")
        errors = payload.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = "; ".join(
                str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors[:3]
            )
            raise UpstreamError(self.UPSTREAM, f"GraphQL errors: {messages}")
        return expect_dict(payload.get("data") or {}, self.UPSTREAM, "GraphQL data")

    def fetch_user(self) -> GitHubUser:
        data = expect_dict(self._get(f"/users/{self.username}"), self.UPSTREAM, "user profile")
        return GitHubUser(
            followers=as_int(data.get("followers")),
            following=as_int(data.get("following")),
            public_repos=as_int(data.get("public_repos")),
            created_at=data.get("created_at") or "",
        )

    def fetch_repos(self) -> List[GitHubRepo]:
        data = self._get(
            f"/users/{self.username}/repos", params={"per_page": 100, "sort": "pushed"}
        )
        if not isinstance(data, list):
            raise UpstreamError(self.UPSTREAM, "repository listing is not a list")
        return [_parse_repo(item) for item in data]

    def fetch_events(self) -> List[GitHubEvent]:
        data = self._get(f"/users/{self.username}/events/public", params={"per_page": 100})
        if not isinstance(data, list):
            raise UpstreamError(self.UPSTREAM, "event feed is not a list")
        return [_parse_event(item) for item in data]

    def fetch_contributions(self) -> ContributionSummary:
        data = self._graphql(CONTRIBUTIONS_QUERY, {"login": self.username})
        user = _object(data.get("user") or {}, "user")
        collection = user.get("contributionsCollection")
        if not collection:
            raise UpstreamError(self.UPSTREAM, "contributionsCollection missing from response")
        collection = _object(collection, "contributionsCollection")
        calendar = _object(collection.get("contributionCalendar") or {}, "contributionCalendar")
        days = []
        for week in _array(calendar.get("weeks"), "contribution weeks"):
            for day in _array(_object(week, "contribution week").get("contributionDays"), "contribution days"):
                day = _object(day, "contribution day")
                days.append((day.get("date", ""), as_int(day.get("contributionCount"))))
        return ContributionSummary(
            total_contributions=as_int(calendar.get("totalContributions")),
            commits=as_int(collection.get("totalCommitContributions")),
            pull_requests=as_int(collection.get("totalPullRequestContributions")),
            issues=as_int(collection.get("totalIssueContributions")),
            repositories=as_int(collection.get("totalRepositoryContributions")),
            calendar=tuple(days),
        )

    def fetch_homepage_batch(self, repos: Sequence[str]) -> HomepageBatch:
        data = self._graphql(build_homepage_query(repos), {"login": self.username})
        user = data.get("user")
        if not user:
            raise UpstreamError(self.UPSTREAM, f"user {self.username} missing from response")
        user = _object(user, "user")

        tracked = []
        for name in repos:
            repo = data.get(repo_alias(name))
            if not repo:
                continue
            repo = _object(repo, f"repository {name}")
            tracked.append(
                GitHubRepo(
                    name=name,
                    stars=as_int(repo.get("stargazerCount")),
                    forks=as_int(repo.get("forkCount")),
                    watchers=0,
                    language=None,
                    fork=False,
                    pushed_at="",
                    url=repo.get("url") or "",
                    description=None,
                )
            )

        collection = _object(user.get("contributionsCollection") or {}, "contributionsCollection")
        calendar = _object(collection.get("contributionCalendar") or {}, "contributionCalendar")
        return HomepageBatch(
            followers=as_int(_object(user.get("followers") or {}, "followers").get("totalCount")),
            total_repos=as_int(_object(user.get("repositories") or {}, "repositories").get("totalCount")),
            commits=as_int(collection.get("totalCommitContributions")),
            total_contributions=as_int(calendar.get("totalContributions")),
            repos=tuple(tracked),
        )

    def search_count(self, kind: str, repo: str, before: Optional[str] = None) -> int:
        """Number of commits, PRs or issues authored by the user in one repository.

        ``before`` (YYYY-MM-DD) restricts the tally to days strictly before it.
        """
        base = f"repo:{self.username}/{repo} author:{self.username}"
        if kind == "commits":
            path = "/search/commits"
            query = base + (f" committer-date:<{before}" if before else "")
        elif kind in ("prs", "issues"):
            path = "/search/issues"
            item_type = "pr" if kind == "prs" else "issue"
            query = f"{base} type:{item_type}" + (f" created:<{before}" if before else "")
        else:
            raise ValueError(f"Invalid search kind '{kind}', must be one of {SEARCH_KINDS}")
        data = _object(self._get(path, params={"q": query, "per_page": 1}), f"{kind} search result")
        return as_int(data.get("total_count"))


def _object(data: Any, what: str) -> Dict[str, Any]:
    return expect_dict(data, GitHubClient.UPSTREAM, what)


def _array(data: Any, what: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise UpstreamError(GitHubClient.UPSTREAM, f"{what} is not a list")
    return data


def _parse_repo(item: Any) -> GitHubRepo:
    item = _object(item, "repository")
    return GitHubRepo(
        name=item.get("name", ""),
        stars=as_int(item.get("stargazers_count")),
        forks=as_int(item.get("forks_count")),
        watchers=as_int(item.get("watchers_count")),
        language=item.get("language"),
        fork=bool(item.get("fork")),
        pushed_at=item.get("pushed_at") or "",
        url=item.get("html_url") or "",
        description=item.get("description"),
    )


def _parse_event(item: Any) -> GitHubEvent:
    item = _object(item, "event")
    payload = _object(item.get("payload") or {}, "event payload")
    full_name = str(_object(item.get("repo") or {}, "event repo").get("name") or "")
    title = _object(payload.get("pull_request") or {}, "pull request").get("title") or _object(
        payload.get("issue") or {}, "issue"
    ).get("title")
    return GitHubEvent(
        type=item.get("type", ""),
        repo=full_name.split("/")[1] if "/" in full_name else full_name,
        created_at=item.get("created_at") or "",
        commit_count=len(_array(payload.get("commits"), "push commits")),
        action=payload.get("action"),
        title=title,
        review_state=_object(payload.get("review") or {}, "review").get("state"),
    )
