"""npm registry client: maintainer package search and daily download ranges."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import quote

import requests

from portfolio_stats.config import Config
from portfolio_stats.errors import UpstreamError
from portfolio_stats.utils import as_int, expect_dict, get_http_session, request_json

logger = logging.getLogger(__name__)

SEARCH_URL = "https://registry.npmjs.org/-/v1/search"
DOWNLOADS_URL = "https://api.npmjs.org/downloads/range"


@dataclass(frozen=True)
class DailyDownloads:
    day: str
    downloads: int


class NpmClient:
    UPSTREAM = "npm"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        search_timeout: float = Config.NPM_SEARCH_TIMEOUT,
        downloads_timeout: float = Config.NPM_DOWNLOADS_TIMEOUT,
    ):
        self._session = session or get_http_session()
        self._search_timeout = search_timeout
        self._downloads_timeout = downloads_timeout

    def search_packages(self, maintainer: str) -> List[str]:
        """Names of every package the maintainer publishes."""
        data = request_json(
            self._session,
            self.UPSTREAM,
            "GET",
            SEARCH_URL,
            params={"text": f"maintainer:{maintainer}", "size": 250},
            timeout=self._search_timeout,
        )
        objects = expect_dict(data, self.UPSTREAM, "search response").get("objects")
        if not isinstance(objects, list):
            raise UpstreamError(self.UPSTREAM, "search response has no 'objects' list")
        names = []
        for obj in objects:
            obj = expect_dict(obj, self.UPSTREAM, "search result")
            package = expect_dict(obj.get("package") or {}, self.UPSTREAM, "search result package")
            name = package.get("name")
            if name:
                names.append(name)
        return names

    def fetch_downloads(self, package: str, start: str, end: str) -> List[DailyDownloads]:
        """Daily download counts for ``package`` over the inclusive range ``start..end``."""
        # Scoped names keep their '@' but the '/' must be encoded
        url = f"{DOWNLOADS_URL}/{start}:{end}/{quote(package, safe='@')}"
        data = request_json(
            self._session, self.UPSTREAM, "GET", url, timeout=self._downloads_timeout
        )
        days = expect_dict(data, self.UPSTREAM, f"downloads for {package}").get("downloads") or []
        if not isinstance(days, list):
            raise UpstreamError(self.UPSTREAM, f"downloads for {package} is not a list")
        result = []
        for item in days:
            item = expect_dict(item, self.UPSTREAM, f"download day for {package}")
            result.append(DailyDownloads(day=item.get("day", ""), downloads=as_int(item.get("downloads"))))
        return result
