"""
Pydantic models for the portfolio stats API

Attributes are snake_case; JSON uses camelCase aliases so the page layer
keeps its established field names. dev.to articles keep dev.to's own
snake_case shape.
"""

from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Source = Literal["api", "cache", "fallback"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== GitHub ====================

class RepoSummary(CamelModel):
    """A repository in the top-N ranking"""
    name: str
    stars: int
    forks: int
    url: str
    description: Optional[str] = None
    language: Optional[str] = None


class StarsBreakdownItem(CamelModel):
    name: str
    stars: int
    url: str


class LanguageCount(CamelModel):
    name: str
    count: int


class ContributionDay(CamelModel):
    date: str
    count: int


class RepoActivity(CamelModel):
    """Search tallies for one tracked repository"""
    repo: str
    commits: int
    pull_requests: int
    issues: int


class ActivityBreakdown(CamelModel):
    commits: int = 0
    pull_requests: int = 0
    code_reviews: int = 0
    issues: int = 0


class RecentEvent(CamelModel):
    type: str
    repo: str
    date: str
    message: str


class GitHubStats(CamelModel):
    """Full GitHub statistics served by /api/github-stats"""
    total_stars: int
    total_forks: int
    total_watchers: int
    total_repos: int
    followers: int
    following: int
    public_repos: int
    account_age_years: int
    total_contributions: int
    recent_commits: int
    recent_prs: int = Field(alias="recentPRs")
    recent_issues: int
    recent_repos: int
    recent_reviews: int
    contribution_calendar: List[ContributionDay] = Field(default_factory=list)
    repo_activity: List[RepoActivity] = Field(default_factory=list)
    activity_breakdown: ActivityBreakdown = Field(default_factory=ActivityBreakdown)
    recent_events: List[RecentEvent] = Field(default_factory=list)
    top_repos: List[RepoSummary] = Field(default_factory=list)
    languages: List[LanguageCount] = Field(default_factory=list)
    stars_breakdown: List[StarsBreakdownItem] = Field(default_factory=list)
    authenticated: bool
    source: Source


# ==================== npm ====================

class DownloadDay(CamelModel):
    day: str
    downloads: int


class PackageStats(CamelModel):
    name: str
    downloads: int
    daily_data: List[DownloadDay] = Field(default_factory=list)


class NpmStats(CamelModel):
    """Registry statistics served by /api/npm-stats"""
    packages: List[PackageStats]
    top_packages: List[PackageStats] = Field(default_factory=list)
    total_downloads: int
    package_count: int
    source: Source


# ==================== dev.to ====================

class DevToUser(BaseModel):
    name: str = ""
    username: str = ""
    profile_image: str = ""


class DevToArticle(BaseModel):
    """Normalized dev.to article (dev.to field names)"""
    id: int
    title: str
    description: str = ""
    url: str
    slug: Optional[str] = None
    cover_image: Optional[str] = None
    social_image: Optional[str] = None
    published_at: Optional[str] = None
    reading_time_minutes: int = 0
    positive_reactions_count: int = 0
    comments_count: int = 0
    page_views_count: int = 0
    tag_list: List[str] = Field(default_factory=list)
    user: Optional[DevToUser] = None


class TopArticle(CamelModel):
    title: str
    url: str
    views: int
    reactions: int


class DevToStats(CamelModel):
    """Blog statistics served by /api/devto-stats"""
    followers: int
    total_views: int
    article_count: int
    total_reactions: int
    total_comments: int
    total_reading_minutes: int
    top_articles: List[TopArticle] = Field(default_factory=list)
    authenticated: bool
    source: Source


class DevToArticlesResponse(CamelModel):
    articles: List[DevToArticle]
    authenticated: bool
    source: Source


class DevToCombinedStats(CamelModel):
    followers: int
    total_views: int


class DevToCombinedResponse(CamelModel):
    articles: List[DevToArticle]
    stats: DevToCombinedStats
    source: Source


# ==================== Homepage ====================

class GitHubSummary(CamelModel):
    total_stars: int
    total_forks: int
    total_repos: int
    followers: int
    recent_commits: int
    total_contributions: int
    stars_breakdown: List[StarsBreakdownItem] = Field(default_factory=list)
    authenticated: bool
    source: Source = "api"


class NpmSummary(CamelModel):
    total_downloads: int
    package_count: int
    source: Source = "api"


class DevToSummary(CamelModel):
    total_views: int
    followers: int
    article_count: int
    total_reactions: int
    total_comments: int
    total_reading_minutes: int
    source: Source = "api"


class HomepageStats(CamelModel):
    """All three sources merged for one page load"""
    github: GitHubSummary
    npm: NpmSummary
    devto: DevToSummary
    source: Source
    fetched_at: Optional[str] = None


# ==================== History ====================

class SnapshotModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class SnapshotNpm(SnapshotModel):
    total_downloads: int
    daily_downloads: Optional[int] = None
    package_count: int


class SnapshotGitHub(SnapshotModel):
    stars: int
    followers: int
    contributions: Optional[int] = None
    daily_contributions: Optional[int] = None
    commits: Optional[int] = None
    daily_commits: Optional[int] = None


class SnapshotDevTo(SnapshotModel):
    views: int
    daily_views: Optional[int] = None
    followers: int
    daily_followers: Optional[int] = None
    reactions: int
    daily_reactions: Optional[int] = None
    comments: int
    daily_comments: Optional[int] = None
    articles: Optional[int] = None


class SnapshotEcosystem(SnapshotModel):
    packages: int
    plugins: int
    rules: int
    owasp_coverage: int
    test_coverage: int


class Snapshot(SnapshotModel):
    """One day's cumulative metrics plus day-over-day deltas"""
    date: str
    npm: SnapshotNpm
    github: SnapshotGitHub
    devto: SnapshotDevTo
    ecosystem: Optional[SnapshotEcosystem] = None

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value


# ==================== Tracking ====================

class TrackRequest(BaseModel):
    page: Optional[str] = None
    event: Optional[str] = None
    referrer: Optional[str] = None

    @field_validator("page", "event", "referrer", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        if isinstance(value, (bool, int, float)):
            return str(value)
        return value


class VisitorEvent(CamelModel):
    timestamp: str
    ip: str
    user_agent: str
    referrer: str
    page: str
    country: Optional[str] = None
    city: Optional[str] = None
    event: str = "pageview"


class TrackResponse(BaseModel):
    success: bool


class ErrorResponse(BaseModel):
    """Model for error responses"""
    detail: str
    error_type: str
