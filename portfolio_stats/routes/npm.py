"""
npm stats route
"""

import logging

from fastapi import APIRouter, Depends

from portfolio_stats.fallbacks import FALLBACK_NPM_STATS
from portfolio_stats.models import NpmStats
from portfolio_stats.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/npm-stats", response_model=NpmStats, tags=["npm"])
async def get_npm_stats(services: Services = Depends(get_services)):
    """
    Download totals and 30-day daily series for the maintainer's packages
    """
    try:
        return await services.npm.get_stats()
    except Exception:
        logger.exception("Unexpected error building npm stats")
        return FALLBACK_NPM_STATS
