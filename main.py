#!/usr/bin/env python3
"""
Main entry point for the portfolio stats FastAPI application
"""

import uvicorn
from portfolio_stats import create_app
from portfolio_stats.config import Config
from portfolio_stats.logging_config import configure_logging

configure_logging(Config.LOG_LEVEL)

# Create FastAPI application instance
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=Config.RELOAD
    )
