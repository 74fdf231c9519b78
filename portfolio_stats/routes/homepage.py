"""
Unified homepage stats route
"""

import logging

from fastapi import APIRouter, Depends, Query

from portfolio_stats.fallbacks import FALLBACK_HOMEPAGE_STATS
from portfolio_stats.models import HomepageStats
from portfolio_stats.services import Services, get_services
from portfolio_stats.services.homepage import with_display_fallbacks

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/homepage-stats", response_model=HomepageStats, tags=["Homepage"])
async def get_homepage_stats(
    display: bool = Query(False, description="Replace unknown (0) token-only counters with fallback figures"),
    services: Services = Depends(get_services),
):
    """
    GitHub, npm and dev.to summaries fetched in parallel

    - **display**: apply the display rule for unauthenticated GitHub counters
    """
    try:
        stats = await services.homepage.get_stats()
    except Exception:
        logger.exception("Unexpected error building homepage stats")
        return FALLBACK_HOMEPAGE_STATS
    return with_display_fallbacks(stats) if display else stats
