"""
GitHub stats route
"""

import logging

from fastapi import APIRouter, Depends

from portfolio_stats.fallbacks import FALLBACK_GITHUB_STATS
from portfolio_stats.models import GitHubStats
from portfolio_stats.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/github-stats", response_model=GitHubStats, tags=["GitHub"])
async def get_github_stats(services: Services = Depends(get_services)):
    """
    GitHub profile, tracked repository and contribution statistics

    Only the allow-listed repositories count toward stars, forks and
    languages. Contribution counters need a token; without one they carry
    the fallback figures and `authenticated` is false.
    """
    try:
        return await services.github.get_stats()
    except Exception:
        logger.exception("Unexpected error building GitHub stats")
        return FALLBACK_GITHUB_STATS
