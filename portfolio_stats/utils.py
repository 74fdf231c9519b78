"""HTTP helpers shared by the upstream clients."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from portfolio_stats.config import Config
from portfolio_stats.errors import UpstreamError

logger = logging.getLogger(__name__)

_HTTP_SESSION: requests.Session | None = None


def get_http_session() -> requests.Session:
    """Shared requests session with connection pooling.

    Retries default to zero: a failed call falls through to cached or
    fallback data, and the next request (or cache expiry) tries again.
    """
    global _HTTP_SESSION
    if _HTTP_SESSION is not None:
        return _HTTP_SESSION

    session = requests.Session()
    retry = Retry(
        total=Config.UPSTREAM_RETRIES,
        connect=Config.UPSTREAM_RETRIES,
        read=Config.UPSTREAM_RETRIES,
        backoff_factor=0.2,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "POST"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(pool_connections=20, pool_maxsize=50, max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": Config.USER_AGENT})
    _HTTP_SESSION = session
    return session


def request_json(
    session: requests.Session,
    upstream: str,
    method: str,
    url: str,
    *,
    timeout: float,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    json: Optional[Dict[str, Any]] = None,
) -> Any:
    """Issue one request and decode the JSON body.

    Every failure mode (network, timeout, non-2xx, undecodable body) is
    raised as :class:`UpstreamError` tagged with the upstream name.
    """
    try:
        response = session.request(
            method, url, params=params, headers=headers, json=json, timeout=timeout
        )
        response.raise_for_status()
        return response.json()
    except requests.Timeout as e:
        raise UpstreamError(upstream, f"timeout after {timeout}s calling {url}") from e
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        raise UpstreamError(upstream, f"HTTP {status} from {url}") from e
    except requests.RequestException as e:
        raise UpstreamError(upstream, f"request to {url} failed: {e}") from e
    except ValueError as e:
        raise UpstreamError(upstream, f"invalid JSON from {url}") from e


def expect_dict(data: Any, upstream: str, what: str) -> Dict[str, Any]:
    """Return ``data`` if it is a JSON object, else raise :class:`UpstreamError`."""
    if not isinstance(data, dict):
        raise UpstreamError(upstream, f"{what} is not an object (got {type(data).__name__})")
    return data


def as_int(value: Any, default: int = 0) -> int:
    """Coerce an upstream numeric field; missing or malformed values become ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default
