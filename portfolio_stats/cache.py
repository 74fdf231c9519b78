"""Tiered in-process TTL cache.

One store is created per process by the app factory and handed to every
service. Callers pick the tier that matches the volatility of the data:

- FRESH: live counters that move during the day (today's downloads, views)
- STANDARD: general API responses
- HISTORICAL: data about fully elapsed days

Entries expire lazily: an expired entry is dropped the next time it is read.
The store resets when the process restarts.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from threading import RLock
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class CacheTTL:
    """TTL tiers, in seconds"""

    FRESH = 60
    STANDARD = 5 * 60
    HISTORICAL = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    key: str
    value: T
    created_at: float
    expires_at: float


class CacheStore:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = RLock()
        self._data: Dict[str, CacheEntry[Any]] = {}

    def get_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                self._data.pop(key, None)
                return None
            return entry

    def get(self, key: str) -> Optional[Any]:
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        now = self._clock()
        with self._lock:
            self._data[key] = CacheEntry(
                key=key, value=value, created_at=now, expires_at=now + ttl
            )

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def stats(self) -> Dict[str, Union[int, List[str]]]:
        with self._lock:
            return {"size": len(self._data), "keys": list(self._data.keys())}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def today_iso(today: Optional[date] = None) -> str:
    """Today's date as YYYY-MM-DD (UTC)"""
    return (today or utc_today()).isoformat()


def yesterday_iso(today: Optional[date] = None) -> str:
    return ((today or utc_today()) - timedelta(days=1)).isoformat()


def is_historical_date(value: str, today: Optional[date] = None) -> bool:
    """True when ``value`` names a day strictly before today."""
    return date.fromisoformat(value) < (today or utc_today())


def date_range_key(prefix: str, start: str, end: str) -> str:
    return f"{prefix}:{start}:{end}"
