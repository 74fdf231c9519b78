"""
Portfolio stats FastAPI application package
"""

from typing import Optional, Type

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import HTTPException

from portfolio_stats.config import Config
from portfolio_stats.models import ErrorResponse
from portfolio_stats.routes.root import router as root_router
from portfolio_stats.routes.github import router as github_router
from portfolio_stats.routes.npm import router as npm_router
from portfolio_stats.routes.devto import router as devto_router
from portfolio_stats.routes.homepage import router as homepage_router
from portfolio_stats.routes.history import router as history_router
from portfolio_stats.routes.track import router as track_router
from portfolio_stats.services import Services, build_services


def create_app(config: Type[Config] = Config, services: Optional[Services] = None) -> FastAPI:
    """Create and configure FastAPI application"""

    # Initialize FastAPI app
    app = FastAPI(
        title=config.TITLE,
        description=config.DESCRIPTION,
        version=config.VERSION,
        docs_url=config.DOCS_URL,
        redoc_url=config.REDOC_URL
    )

    # One cache and service set per process
    app.state.services = services or build_services(config)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOW_ORIGINS,
        allow_credentials=config.ALLOW_CREDENTIALS,
        allow_methods=config.ALLOW_METHODS,
        allow_headers=config.ALLOW_HEADERS,
    )

    # Include routers
    app.include_router(root_router)
    app.include_router(github_router)
    app.include_router(npm_router)
    app.include_router(devto_router)
    app.include_router(homepage_router)
    app.include_router(history_router)
    app.include_router(track_router)

    # Exception handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        """Custom HTTP exception handler"""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                detail=str(exc.detail),
                error_type="HTTPException"
            ).model_dump()
        )

    return app
