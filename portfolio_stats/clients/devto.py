"""dev.to (Forem) client.

The public article listing works without a key but reports no page views.
``/articles/me/all`` and ``/followers/users`` need ``DEVTO_API_KEY``; the
API has no follower-count field, so the count is the length of the list.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from portfolio_stats.config import Config
from portfolio_stats.errors import CredentialMissing, UpstreamError
from portfolio_stats.models import DevToArticle, DevToUser
from portfolio_stats.utils import as_int, expect_dict, get_http_session, request_json

logger = logging.getLogger(__name__)

API_BASE = "https://dev.to/api"


class DevToClient:
    UPSTREAM = "devto"

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = Config.DEVTO_TIMEOUT,
    ):
        self._api_key = api_key
        self._session = session or get_http_session()
        self._timeout = timeout

    @property
    def authenticated(self) -> bool:
        return bool(self._api_key)

    def _get_list(self, path: str, params: Dict[str, Any], auth: bool = False) -> List[Dict[str, Any]]:
        headers = None
        if auth:
            if not self._api_key:
                raise CredentialMissing(self.UPSTREAM, f"{path} requires DEVTO_API_KEY")
            headers = {"api-key": self._api_key}
        data = request_json(
            self._session,
            self.UPSTREAM,
            "GET",
            f"{API_BASE}{path}",
            params=params,
            headers=headers,
            timeout=self._timeout,
        )
        if not isinstance(data, list):
            raise UpstreamError(self.UPSTREAM, f"{path} did not return a list")
        return data

    def fetch_public_articles(self, username: str) -> List[DevToArticle]:
        """Published articles without view counts (``page_views_count`` is 0)."""
        items = self._get_list("/articles", {"username": username, "per_page": 100})
        return [normalize_article(item, views_available=False) for item in items]

    def fetch_my_articles(self) -> List[DevToArticle]:
        """All of the key owner's articles, drafts included, with view counts."""
        items = self._get_list("/articles/me/all", {"per_page": 100}, auth=True)
        return [normalize_article(item, views_available=True) for item in items]

    def fetch_followers(self) -> int:
        items = self._get_list("/followers/users", {"per_page": 1000}, auth=True)
        return len(items)


def normalize_article(item: Any, views_available: bool) -> DevToArticle:
    item = expect_dict(item, DevToClient.UPSTREAM, "article")
    user = expect_dict(item.get("user") or {}, DevToClient.UPSTREAM, "article user")
    tags = item.get("tag_list") or []
    if isinstance(tags, str):
        # /articles/me/all returns tags as a comma separated string
        tags = [t.strip() for t in tags.split(",") if t.strip()]
    elif not isinstance(tags, list):
        raise UpstreamError(DevToClient.UPSTREAM, "article tag_list is neither a list nor a string")
    try:
        return _build_article(item, user, tags, views_available)
    except ValidationError as e:
        raise UpstreamError(DevToClient.UPSTREAM, f"malformed article: {e.errors()[:1]}") from e


def _build_article(item: Dict[str, Any], user: Dict[str, Any], tags: List[Any], views_available: bool) -> DevToArticle:
    return DevToArticle(
        id=as_int(item.get("id")),
        title=item.get("title") or "",
        description=item.get("description") or "",
        url=item.get("url") or "",
        slug=item.get("slug"),
        cover_image=item.get("cover_image"),
        social_image=item.get("social_image"),
        published_at=item.get("published_at"),
        reading_time_minutes=as_int(item.get("reading_time_minutes")),
        positive_reactions_count=as_int(item.get("positive_reactions_count")),
        comments_count=as_int(item.get("comments_count")),
        page_views_count=as_int(item.get("page_views_count")) if views_available else 0,
        tag_list=[str(t) for t in tags],
        user=DevToUser(
            name=user.get("name") or "",
            username=user.get("username") or "",
            profile_image=user.get("profile_image") or "",
        )
        if user
        else None,
    )
