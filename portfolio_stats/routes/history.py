"""
Metrics history route
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from portfolio_stats.models import Snapshot
from portfolio_stats.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/api/metrics-history",
    response_model=List[Snapshot],
    response_model_exclude_none=True,
    tags=["History"],
)
async def get_metrics_history(services: Services = Depends(get_services)):
    """
    Daily snapshots ordered by date (empty until the capture job has run)
    """
    try:
        return await services.history.list()
    except Exception:
        logger.exception("Unexpected error reading metrics history")
        return []
