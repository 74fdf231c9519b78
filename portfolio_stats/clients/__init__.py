"""
Upstream API clients
"""

from portfolio_stats.clients.devto import DevToClient
from portfolio_stats.clients.github import GitHubClient
from portfolio_stats.clients.npm import NpmClient

__all__ = ["DevToClient", "GitHubClient", "NpmClient"]
