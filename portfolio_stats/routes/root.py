"""
Root and health routes for the portfolio stats API
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from portfolio_stats.config import Config
from portfolio_stats.services import Services, get_services

router = APIRouter()


@router.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to the Portfolio Stats API",
        "version": Config.VERSION,
        "docs": Config.DOCS_URL,
        "endpoints": {
            "github": "/api/github-stats",
            "npm": "/api/npm-stats",
            "devto_stats": "/api/devto-stats",
            "devto_articles": "/api/devto-articles",
            "devto_combined": "/api/devto-combined",
            "homepage": "/api/homepage-stats",
            "history": "/api/metrics-history",
            "track": "/api/track"
        }
    }


@router.get("/health", tags=["Health"])
async def health_check(services: Services = Depends(get_services)):
    """Health check endpoint with cache occupancy"""
    try:
        return {
            "status": "healthy",
            "message": "API is running",
            "cache": services.cache.stats()
        }
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "error": str(e)
            }
        )
