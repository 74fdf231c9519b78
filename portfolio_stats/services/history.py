"""
Historical metrics reader

Serves the daily snapshot series written by the offline capture job. The
preferred input is the consolidated ``aggregation.json`` (an array ordered
by date); older deployments only have one ``YYYY-MM-DD.json`` per day. This
module never writes to the snapshot directory.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from portfolio_stats.cache import CacheStore, CacheTTL
from portfolio_stats.models import (
    Snapshot,
    SnapshotDevTo,
    SnapshotEcosystem,
    SnapshotGitHub,
    SnapshotNpm,
)

logger = logging.getLogger(__name__)

HISTORY_KEY = "history:snapshots"
AGGREGATION_FILE = "aggregation.json"
DAILY_FILE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\.json$")


class HistoryReader:
    def __init__(
        self,
        cache: CacheStore,
        snapshots_dir: Path,
        dev_mode: bool = False,
        seed: Optional["SeedConfig"] = None,
    ):
        self._cache = cache
        self._dir = Path(snapshots_dir)
        self._dev_mode = dev_mode
        self._seed = seed

    async def list(self) -> List[Snapshot]:
        """Snapshots ascending by date; ``[]`` (or the seed series) when none exist."""
        # files change at most once a day, but in development read them every time
        if not self._dev_mode:
            cached = self._cache.get(HISTORY_KEY)
            if cached is not None:
                return list(cached)

        snapshots = await run_in_threadpool(self._read)
        if not snapshots:
            if self._seed is not None:
                logger.info("No snapshots found, serving seed series")
                return generate_seed_series(self._seed)
            logger.info("No snapshots found in %s, returning empty series", self._dir)
            return []

        if not self._dev_mode:
            self._cache.set(HISTORY_KEY, tuple(snapshots), CacheTTL.HISTORICAL)
        return snapshots

    def _read(self) -> List[Snapshot]:
        records = self._read_aggregation()
        if records is None:
            records = self._read_daily_files()

        snapshots: Dict[str, Snapshot] = {}
        for record in records:
            try:
                snapshot = Snapshot.model_validate(record)
            except ValidationError as e:
                logger.warning("Skipping invalid snapshot record: %s", e.errors()[:1])
                continue
            snapshots[snapshot.date] = snapshot
        return [snapshots[day] for day in sorted(snapshots)]

    def _read_aggregation(self) -> Optional[List[Any]]:
        path = self._dir / AGGREGATION_FILE
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Unreadable %s: %s", path, e)
            return None
        if not isinstance(data, list):
            logger.warning("%s does not hold an array, ignoring it", path)
            return None
        return data

    def _read_daily_files(self) -> List[Any]:
        if not self._dir.is_dir():
            return []
        records = []
        for path in sorted(self._dir.iterdir()):
            if not DAILY_FILE_RE.match(path.name):
                continue
            try:
                with path.open(encoding="utf-8") as f:
                    records.append(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable snapshot %s: %s", path.name, e)
        return records


# ==================== Seed series ====================

@dataclass(frozen=True)
class SeedConfig:
    """Current totals and the date range the synthetic curve spans."""
    start: date
    end: date
    npm_downloads: int = 8602
    npm_packages: int = 14
    github_stars: int = 1
    github_followers: int = 6
    github_contributions: int = 614
    github_commits: int = 572
    devto_views: int = 1699
    devto_followers: int = 89
    devto_reactions: int = 10
    devto_comments: int = 9
    devto_articles: int = 28
    plugins: int = 15
    rules: int = 221
    owasp_coverage: int = 100
    test_coverage: int = 90


def growth_curve(current: int, day: int, total_days: int, start_ratio: float = 0.05) -> int:
    """Logistic (S-shaped) growth from ``start_ratio * current`` to ``current``."""
    progress = day / total_days if total_days else 1.0
    curve = 1 / (1 + math.exp(-6 * (progress - 0.5)))
    return math.floor(current * (start_ratio + (1 - start_ratio) * curve))


def linear_growth(current: int, day: int, total_days: int, start_ratio: float = 0.1) -> int:
    progress = day / total_days if total_days else 1.0
    return math.floor(current * (start_ratio + (1 - start_ratio) * progress))


def step_growth(current: int, day: int, total_days: int) -> int:
    progress = day / total_days if total_days else 1.0
    return max(1, math.floor(current * progress))


def generate_seed_series(seed: SeedConfig) -> List[Snapshot]:
    """Deterministic synthetic history ending at the seed's current totals."""
    total_days = (seed.end - seed.start).days
    if total_days < 0:
        return []

    def values(day: int) -> Dict[str, int]:
        return {
            "downloads": growth_curve(seed.npm_downloads, day, total_days, 0.02),
            "followers": linear_growth(seed.github_followers, day, total_days, 0.3),
            "contributions": linear_growth(seed.github_contributions, day, total_days, 0.05),
            "commits": linear_growth(seed.github_commits, day, total_days, 0.05),
            "views": growth_curve(seed.devto_views, day, total_days, 0.01),
            "devto_followers": growth_curve(seed.devto_followers, day, total_days, 0.05),
            "reactions": linear_growth(seed.devto_reactions, day, total_days, 0.1),
            "comments": linear_growth(seed.devto_comments, day, total_days, 0.1),
        }

    series = []
    for day in range(total_days + 1):
        progress = day / total_days if total_days else 1.0
        now = values(day)
        prev = values(max(0, day - 1))
        delta = {k: max(0, now[k] - prev[k]) for k in now}
        series.append(
            Snapshot(
                date=(seed.start + timedelta(days=day)).isoformat(),
                npm=SnapshotNpm(
                    total_downloads=now["downloads"],
                    daily_downloads=delta["downloads"],
                    package_count=min(
                        seed.npm_packages, max(5, step_growth(seed.npm_packages, day, total_days))
                    ),
                ),
                github=SnapshotGitHub(
                    # the first star arrived in the final week
                    stars=min(seed.github_stars, 1 if day > total_days - 7 else 0),
                    followers=now["followers"],
                    contributions=now["contributions"],
                    daily_contributions=delta["contributions"],
                    commits=now["commits"],
                    daily_commits=delta["commits"],
                ),
                devto=SnapshotDevTo(
                    views=now["views"],
                    daily_views=delta["views"],
                    followers=now["devto_followers"],
                    daily_followers=delta["devto_followers"],
                    reactions=now["reactions"],
                    daily_reactions=delta["reactions"],
                    comments=now["comments"],
                    daily_comments=delta["comments"],
                    articles=step_growth(seed.devto_articles, day, total_days),
                ),
                ecosystem=SnapshotEcosystem(
                    packages=min(seed.npm_packages, max(3, step_growth(seed.npm_packages, day, total_days))),
                    plugins=step_growth(seed.plugins, day, total_days),
                    rules=linear_growth(seed.rules, day, total_days, 0.1),
                    owasp_coverage=min(seed.owasp_coverage, math.floor(50 + 50 * progress)),
                    test_coverage=min(seed.test_coverage, math.floor(60 + 30 * progress)),
                ),
            )
        )
    return series
