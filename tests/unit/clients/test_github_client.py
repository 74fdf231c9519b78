"""Tests for clients/github.py: payload normalization and failure mapping."""

from __future__ import annotations

import pytest
import requests

from portfolio_stats.clients.github import (
    GitHubClient,
    build_homepage_query,
    repo_alias,
)
from portfolio_stats.errors import CredentialMissing, UpstreamError
from tests.helpers import routed_session

USER = {"followers": 51, "following": 30, "public_repos": 35, "created_at": "2017-03-01T10:00:00Z"}

REPOS = [
    {
        "name": "eslint",
        "stargazers_count": 8,
        "forks_count": 1,
        "watchers_count": 8,
        "language": "TypeScript",
        "fork": False,
        "pushed_at": "2026-01-10T00:00:00Z",
        "html_url": "https://github.com/ofri-peretz/eslint",
        "description": "Monorepo",
    },
    {
        "name": "some-fork",
        "stargazers_count": 100,
        "fork": True,
        "html_url": "https://github.com/ofri-peretz/some-fork",
    },
]


class TestRestCalls:
    def test_fetch_user(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/users/ofri-peretz": USER}))
        user = client.fetch_user()
        assert user.followers == 51
        assert user.public_repos == 35
        assert user.created_at.startswith("2017")

    def test_fetch_repos_normalizes_fields(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/repos": REPOS}))
        repos = client.fetch_repos()
        assert [r.name for r in repos] == ["eslint", "some-fork"]
        assert repos[0].stars == 8
        assert repos[0].url == "https://github.com/ofri-peretz/eslint"
        assert repos[1].fork is True
        assert repos[1].forks == 0  # missing counters default to 0

    def test_fetch_events(self):
        events = [
            {
                "type": "PushEvent",
                "repo": {"name": "ofri-peretz/eslint"},
                "created_at": "2026-01-10T00:00:00Z",
                "payload": {"commits": [{"message": "a"}, {"message": "b"}]},
            },
            {
                "type": "PullRequestEvent",
                "repo": {"name": "ofri-peretz/eslint"},
                "created_at": "2026-01-09T00:00:00Z",
                "payload": {"action": "opened", "pull_request": {"title": "Add rule"}},
            },
        ]
        client = GitHubClient("ofri-peretz", session=routed_session({"/events/public": events}))
        parsed = client.fetch_events()
        assert parsed[0].repo == "eslint"
        assert parsed[0].commit_count == 2
        assert parsed[1].title == "Add rule"
        assert parsed[1].action == "opened"

    def test_token_sent_when_configured(self):
        session = routed_session({"/users/ofri-peretz": USER})
        GitHubClient("ofri-peretz", token="secret", session=session).fetch_user()
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_no_token_no_auth_header(self):
        session = routed_session({"/users/ofri-peretz": USER})
        GitHubClient("ofri-peretz", session=session).fetch_user()
        assert "Authorization" not in session.request.call_args.kwargs["headers"]

    def test_http_error_maps_to_upstream_error(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/users/": ({}, 503)}))
        with pytest.raises(UpstreamError, match="HTTP 503"):
            client.fetch_user()

    def test_timeout_maps_to_upstream_error(self):
        client = GitHubClient(
            "ofri-peretz", session=routed_session({"/users/": requests.Timeout("slow")})
        )
        with pytest.raises(UpstreamError, match="timeout"):
            client.fetch_user()

    def test_non_list_repo_payload_rejected(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/repos": {"message": "x"}}))
        with pytest.raises(UpstreamError):
            client.fetch_repos()


    def test_non_object_user_payload_rejected(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/users/ofri-peretz": ["x"]}))
        with pytest.raises(UpstreamError, match="user profile"):
            client.fetch_user()

    def test_non_object_repo_item_rejected(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/repos": [REPOS[0], "oops"]}))
        with pytest.raises(UpstreamError, match="repository"):
            client.fetch_repos()

    def test_malformed_event_payload_rejected(self):
        events = [{"type": "PushEvent", "repo": "ofri-peretz/eslint", "payload": {"commits": 3}}]
        client = GitHubClient("ofri-peretz", session=routed_session({"/events/public": events}))
        with pytest.raises(UpstreamError):
            client.fetch_events()

class TestGraphQL:
    def test_contributions_require_token(self):
        client = GitHubClient("ofri-peretz", session=routed_session({}))
        with pytest.raises(CredentialMissing):
            client.fetch_contributions()

    def test_fetch_contributions(self):
        payload = {
            "data": {
                "user": {
                    "contributionsCollection": {
                        "totalCommitContributions": 500,
                        "totalPullRequestContributions": 300,
                        "totalIssueContributions": 150,
                        "totalRepositoryContributions": 20,
                        "contributionCalendar": {
                            "totalContributions": 1800,
                            "weeks": [
                                {"contributionDays": [
                                    {"date": "2026-01-01", "contributionCount": 3},
                                    {"date": "2026-01-02", "contributionCount": 0},
                                ]},
                                {"contributionDays": [
                                    {"date": "2026-01-03", "contributionCount": 7},
                                ]},
                            ],
                        },
                    }
                }
            }
        }
        client = GitHubClient("ofri-peretz", token="t", session=routed_session({"/graphql": payload}))
        summary = client.fetch_contributions()
        assert summary.total_contributions == 1800
        assert summary.commits == 500
        assert summary.pull_requests == 300
        assert summary.calendar == (("2026-01-01", 3), ("2026-01-02", 0), ("2026-01-03", 7))

    def test_graphql_errors_raise(self):
        payload = {"errors": [{"message": "Something went wrong"}]}
        client = GitHubClient("ofri-peretz", token="t", session=routed_session({"/graphql": payload}))
        with pytest.raises(UpstreamError, match="Something went wrong"):
            client.fetch_contributions()

    def test_non_object_graphql_payload(self):
        client = GitHubClient("ofri-peretz", token="t", session=routed_session({"/graphql": ["x"]}))
        with pytest.raises(UpstreamError, match="GraphQL response"):
            client.fetch_contributions()

    def test_malformed_calendar_weeks(self):
        payload = {"data": {"user": {"contributionsCollection": {"contributionCalendar": {"weeks": "none"}}}}}
        client = GitHubClient("ofri-peretz", token="t", session=routed_session({"/graphql": payload}))
        with pytest.raises(UpstreamError, match="contribution weeks"):
            client.fetch_contributions()

    def test_homepage_batch(self):
        payload = {
            "data": {
                "user": {
                    "followers": {"totalCount": 6},
                    "repositories": {"totalCount": 35},
                    "contributionsCollection": {
                        "totalCommitContributions": 477,
                        "contributionCalendar": {"totalContributions": 583},
                    },
                },
                "repo_ofriperetz_dev": {"name": "ofriperetz-dev", "stargazerCount": 3, "forkCount": 0, "url": "u1"},
                "repo_eslint": {"name": "eslint", "stargazerCount": 8, "forkCount": 2, "url": "u2"},
            }
        }
        client = GitHubClient("ofri-peretz", token="t", session=routed_session({"/graphql": payload}))
        batch = client.fetch_homepage_batch(["ofriperetz-dev", "eslint", "missing-repo"])
        assert batch.followers == 6
        assert batch.total_repos == 35
        assert batch.commits == 477
        assert batch.total_contributions == 583
        assert [(r.name, r.stars) for r in batch.repos] == [("ofriperetz-dev", 3), ("eslint", 8)]

    def test_homepage_query_aliases(self):
        query = build_homepage_query(["ofriperetz-dev", "eslint"])
        assert "repo_ofriperetz_dev: repository(owner: $login, name: \"ofriperetz-dev\")" in query
        assert "repo_eslint:" in query
        assert repo_alias("a.b-c") == "repo_a_b_c"


class TestSearch:
    def test_commit_search_query(self):
        session = routed_session({"/search/commits": {"total_count": 42}})
        client = GitHubClient("ofri-peretz", session=session)
        assert client.search_count("commits", "eslint", before="2026-01-15") == 42
        query = session.request.call_args.kwargs["params"]["q"]
        assert "repo:ofri-peretz/eslint" in query
        assert "committer-date:<2026-01-15" in query

    def test_pr_search_query(self):
        session = routed_session({"/search/issues": {"total_count": 7}})
        client = GitHubClient("ofri-peretz", session=session)
        assert client.search_count("prs", "eslint") == 7
        assert "type:pr" in session.request.call_args.kwargs["params"]["q"]

    def test_unknown_kind(self):
        client = GitHubClient("ofri-peretz", session=routed_session({}))
        with pytest.raises(ValueError):
            client.search_count("stars", "eslint")

    def test_non_object_search_result(self):
        client = GitHubClient("ofri-peretz", session=routed_session({"/search/commits": [42]}))
        with pytest.raises(UpstreamError, match="commits search result"):
            client.search_count("commits", "eslint")
