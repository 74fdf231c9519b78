"""Tests for clients/npm.py."""

from __future__ import annotations

import pytest
import requests

from portfolio_stats.clients.npm import NpmClient
from portfolio_stats.errors import UpstreamError
from tests.helpers import routed_session


class TestSearchPackages:
    def test_returns_package_names(self):
        payload = {
            "objects": [
                {"package": {"name": "eslint-plugin-pg", "version": "1.0.0"}},
                {"package": {"name": "@interlace/eslint-devkit"}},
                {"package": {}},
            ]
        }
        session = routed_session({"/-/v1/search": payload})
        names = NpmClient(session=session).search_packages("ofriperetz")
        assert names == ["eslint-plugin-pg", "@interlace/eslint-devkit"]
        assert session.request.call_args.kwargs["params"]["text"] == "maintainer:ofriperetz"

    def test_malformed_search_response(self):
        session = routed_session({"/-/v1/search": {"error": "nope"}})
        with pytest.raises(UpstreamError):
            NpmClient(session=session).search_packages("ofriperetz")

    def test_non_object_search_response(self):
        session = routed_session({"/-/v1/search": ["eslint-plugin-pg"]})
        with pytest.raises(UpstreamError, match="search response"):
            NpmClient(session=session).search_packages("ofriperetz")

    def test_non_object_search_result(self):
        session = routed_session({"/-/v1/search": {"objects": ["eslint-plugin-pg"]}})
        with pytest.raises(UpstreamError, match="search result"):
            NpmClient(session=session).search_packages("ofriperetz")

    def test_network_error(self):
        session = routed_session({"/-/v1/search": requests.ConnectionError("down")})
        with pytest.raises(UpstreamError, match="npm"):
            NpmClient(session=session).search_packages("ofriperetz")


class TestFetchDownloads:
    def test_parses_daily_series(self):
        payload = {
            "start": "2026-01-01",
            "end": "2026-01-02",
            "package": "eslint-plugin-pg",
            "downloads": [{"day": "2026-01-01", "downloads": 10}, {"day": "2026-01-02", "downloads": 4}],
        }
        session = routed_session({"/downloads/range/": payload})
        days = NpmClient(session=session).fetch_downloads("eslint-plugin-pg", "2026-01-01", "2026-01-02")
        assert [(d.day, d.downloads) for d in days] == [("2026-01-01", 10), ("2026-01-02", 4)]

    def test_scoped_package_url(self):
        session = routed_session({"/downloads/range/": {"downloads": []}})
        NpmClient(session=session).fetch_downloads("@interlace/eslint-devkit", "2026-01-01", "2026-01-14")
        url = session.request.call_args.args[1]
        assert url.endswith("/2026-01-01:2026-01-14/@interlace%2Feslint-devkit")

    def test_unknown_package_is_upstream_error(self):
        session = routed_session({"/downloads/range/": ({"error": "not found"}, 404)})
        with pytest.raises(UpstreamError, match="404"):
            NpmClient(session=session).fetch_downloads("nope", "2026-01-01", "2026-01-02")

    def test_list_body_is_upstream_error(self):
        session = routed_session({"/downloads/range/": ["unexpected"]})
        with pytest.raises(UpstreamError, match="not an object"):
            NpmClient(session=session).fetch_downloads("eslint-plugin-pg", "2026-01-01", "2026-01-02")

    def test_non_object_day_is_upstream_error(self):
        session = routed_session({"/downloads/range/": {"downloads": [10, 4]}})
        with pytest.raises(UpstreamError):
            NpmClient(session=session).fetch_downloads("eslint-plugin-pg", "2026-01-01", "2026-01-02")
