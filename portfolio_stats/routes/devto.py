"""
dev.to routes
"""

import logging

from fastapi import APIRouter, Depends

from portfolio_stats.fallbacks import FALLBACK_DEVTO_COMBINED_STATS, FALLBACK_DEVTO_STATS
from portfolio_stats.models import DevToArticlesResponse, DevToCombinedResponse, DevToStats
from portfolio_stats.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/devto-stats", response_model=DevToStats, tags=["dev.to"])
async def get_devto_stats(services: Services = Depends(get_services)):
    """
    Followers, views and engagement totals
    """
    try:
        return await services.devto.get_stats()
    except Exception:
        logger.exception("Unexpected error building dev.to stats")
        return FALLBACK_DEVTO_STATS


@router.get("/api/devto-articles", response_model=DevToArticlesResponse, tags=["dev.to"])
async def get_devto_articles(services: Services = Depends(get_services)):
    """
    Published articles, newest first

    `page_views_count` is only populated when DEVTO_API_KEY is configured.
    """
    try:
        return await services.devto.get_articles()
    except Exception:
        logger.exception("Unexpected error listing dev.to articles")
        return DevToArticlesResponse(articles=[], authenticated=False, source="fallback")


@router.get("/api/devto-combined", response_model=DevToCombinedResponse, tags=["dev.to"])
async def get_devto_combined(services: Services = Depends(get_services)):
    """
    Articles and headline stats in a single response
    """
    try:
        return await services.devto.get_combined()
    except Exception:
        logger.exception("Unexpected error building combined dev.to response")
        return DevToCombinedResponse(
            articles=[], stats=FALLBACK_DEVTO_COMBINED_STATS, source="fallback"
        )
