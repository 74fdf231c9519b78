"""
Last known good figures, served when live and cached data are both unavailable.

Update these by hand from the platform dashboards when an upstream stays
down for long. Callers must copy before mutating (``model_copy(deep=True)``).
"""

from portfolio_stats.models import (
    DevToCombinedStats,
    DevToStats,
    DevToSummary,
    GitHubStats,
    GitHubSummary,
    HomepageStats,
    LanguageCount,
    NpmStats,
    NpmSummary,
    PackageStats,
    RepoSummary,
)

FALLBACK_GITHUB_STATS = GitHubStats(
    total_stars=11,
    total_forks=2,
    total_watchers=35,
    total_repos=35,
    followers=51,
    following=30,
    public_repos=35,
    account_age_years=9,
    total_contributions=1799,
    recent_commits=477,
    recent_prs=319,
    recent_issues=168,
    recent_repos=35,
    recent_reviews=0,
    top_repos=[
        RepoSummary(
            name="eslint-plugin-secure-coding",
            stars=3,
            forks=0,
            url="https://github.com/ofri-peretz/eslint-plugin-secure-coding",
            description="Security-focused ESLint rules",
        )
    ],
    languages=[
        LanguageCount(name="TypeScript", count=25),
        LanguageCount(name="JavaScript", count=8),
        LanguageCount(name="Vue", count=2),
    ],
    authenticated=False,
    source="fallback",
)

_FALLBACK_PACKAGES = [
    PackageStats(name="eslint-plugin-secure-coding", downloads=1900),
    PackageStats(name="eslint-plugin-vercel-ai-security", downloads=983),
    PackageStats(name="@interlace/eslint-devkit", downloads=833),
    PackageStats(name="eslint-plugin-pg", downloads=817),
    PackageStats(name="eslint-plugin-browser-security", downloads=576),
    PackageStats(name="eslint-plugin-express-security", downloads=571),
    PackageStats(name="eslint-plugin-lambda-security", downloads=570),
    PackageStats(name="eslint-plugin-crypto", downloads=565),
]

FALLBACK_NPM_STATS = NpmStats(
    packages=_FALLBACK_PACKAGES,
    top_packages=_FALLBACK_PACKAGES[:6],
    total_downloads=9500,
    package_count=16,
    source="fallback",
)

FALLBACK_DEVTO_FOLLOWERS = 85
FALLBACK_DEVTO_VIEWS = 1834

FALLBACK_DEVTO_STATS = DevToStats(
    followers=FALLBACK_DEVTO_FOLLOWERS,
    total_views=FALLBACK_DEVTO_VIEWS,
    article_count=28,
    total_reactions=10,
    total_comments=9,
    total_reading_minutes=100,
    authenticated=False,
    source="fallback",
)

FALLBACK_DEVTO_COMBINED_STATS = DevToCombinedStats(
    followers=FALLBACK_DEVTO_FOLLOWERS,
    total_views=FALLBACK_DEVTO_VIEWS,
)

FALLBACK_HOMEPAGE_STATS = HomepageStats(
    github=GitHubSummary(
        total_stars=11,
        total_forks=2,
        total_repos=35,
        followers=6,
        recent_commits=477,
        total_contributions=583,
        authenticated=False,
        source="fallback",
    ),
    npm=NpmSummary(total_downloads=9611, package_count=16, source="fallback"),
    devto=DevToSummary(
        total_views=FALLBACK_DEVTO_VIEWS,
        followers=FALLBACK_DEVTO_FOLLOWERS,
        article_count=28,
        total_reactions=10,
        total_comments=9,
        total_reading_minutes=100,
        source="fallback",
    ),
    source="fallback",
)
