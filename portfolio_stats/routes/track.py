"""
Visitor tracking route

Anonymous visitor events are written to the log only; a real sink can be
attached to the ``portfolio_stats.visitors`` logger.
"""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from portfolio_stats.models import TrackRequest, TrackResponse, VisitorEvent

logger = logging.getLogger(__name__)
visitor_logger = logging.getLogger("portfolio_stats.visitors")

router = APIRouter()


def build_visitor_event(request: Request, body: TrackRequest) -> VisitorEvent:
    forwarded_for = request.headers.get("x-forwarded-for")
    ip = forwarded_for.split(",")[0].strip() if forwarded_for else ""
    return VisitorEvent(
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        ip=ip or "unknown",
        user_agent=request.headers.get("user-agent") or "unknown",
        referrer=request.headers.get("referer") or body.referrer or "direct",
        page=body.page or "/",
        country=request.headers.get("x-vercel-ip-country"),
        city=request.headers.get("x-vercel-ip-city"),
        event=body.event or "pageview",
    )


@router.post("/api/track", response_model=TrackResponse, tags=["Tracking"])
async def track_visitor(request: Request):
    """
    Record an anonymous visitor event (page view or outbound click)

    Always answers 200; a body that cannot be read yields `success: false`.
    """
    try:
        raw = await request.body()
        body = TrackRequest.model_validate(json.loads(raw) if raw else {})
        event = build_visitor_event(request, body)
        visitor_logger.info("[VISITOR] %s", event.model_dump_json(by_alias=True, exclude_none=True))
        return TrackResponse(success=True)
    except Exception:
        logger.exception("[VISITOR_ERROR] failed to record visitor event")
        return TrackResponse(success=False)
