"""
Configuration for the portfolio stats service
"""

import os
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration"""

    # API settings
    TITLE = "Portfolio Stats API"
    DESCRIPTION = "Aggregated GitHub, npm and dev.to statistics for the portfolio site"
    VERSION = "1.0.0"
    DOCS_URL = "/docs"
    REDOC_URL = "/redoc"

    # CORS settings
    ALLOW_ORIGINS = ["*"]
    ALLOW_CREDENTIALS = True
    ALLOW_METHODS = ["*"]
    ALLOW_HEADERS = ["*"]

    # Server settings
    HOST = "0.0.0.0"
    PORT = int(os.getenv("PORT", "8000"))
    RELOAD = _env_flag("RELOAD", False)

    # Environment
    DEV_MODE = os.getenv("PORTFOLIO_ENV", "production").lower() == "development"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Upstream credentials (optional; absence selects the public code path)
    GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "").strip() or None
    DEVTO_API_KEY = os.getenv("DEVTO_API_KEY", "").strip() or None

    # Upstream HTTP
    USER_AGENT = "portfolio-stats"
    UPSTREAM_RETRIES = 0
    GITHUB_TIMEOUT = 10
    GITHUB_GRAPHQL_TIMEOUT = 8
    NPM_SEARCH_TIMEOUT = 10
    NPM_DOWNLOADS_TIMEOUT = 5
    DEVTO_TIMEOUT = 10

    # GitHub: only these repositories count toward stars, forks and languages
    GITHUB_USERNAME = "ofri-peretz"
    GITHUB_TRACKED_REPOS = ("ofriperetz-dev", "eslint")

    # npm
    NPM_MAINTAINER = "ofriperetz"
    NPM_EXCLUDED_PACKAGES = (
        "eslint-plugin-mcp",
        "eslint-plugin-llm-optimized",
        "eslint-plugin-llm",
        "eslint-plugin-mcp-optimized",
    )
    NPM_EXCLUDED_PREFIXES = ("@forge-js/",)
    NPM_DOWNLOAD_WINDOW_DAYS = 30

    # dev.to
    DEVTO_USERNAME = "ofri-peretz"

    # Historical snapshots (written by the offline capture job)
    SNAPSHOTS_DIR = Path(os.getenv("SNAPSHOTS_DIR", os.path.join(".data", "snapshots")))
    HISTORY_SEED_ENABLED = _env_flag("HISTORY_SEED_ENABLED", False)
    MEASUREMENT_START_DATE = "2025-12-01"
    SEED_END_DATE = "2026-01-09"
