"""Shared fixtures for unit and route tests.

No network access; every upstream is a MagicMock.
"""

from __future__ import annotations

import pytest

from portfolio_stats.cache import CacheStore
from tests.helpers import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> CacheStore:
    return CacheStore(clock=clock)
