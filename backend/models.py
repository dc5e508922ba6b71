"""Data models and types used across the backend.

Storage tables are defined in database.py and HTTP schemas in schemas.py.
Records here use the camelCase keys of the JSON the API returns, so a
record can be cached and served without renaming.
"""

from typing import Literal, Protocol, TypedDict


class DomainCheckResult(TypedDict):
    """Registrar availability for one TLD variant."""

    domain: str
    available: bool
    error: bool


class SearchResult(TypedDict):
    title: str
    link: str
    snippet: str


class SocialHandleResult(TypedDict):
    """Availability of @handle on one social platform."""

    platform: str
    handle: str
    url: str
    available: bool
    status: int | str
    icon: str
    error: bool


class ScoreSet(TypedDict):
    domainStrength: int
    competitionIntensity: int
    seoDifficulty: int
    socialMediaAvailability: int


class Insight(TypedDict):
    title: str
    points: str
    description: str
    type: Literal["positive", "negative"]


class DomainAvailabilityItem(TypedDict):
    domain: str
    isAvailable: bool


class GoogleCompetition(TypedDict):
    topResults: list[SearchResult]


class DetailedAnalysis(TypedDict):
    domainAvailability: list[DomainAvailabilityItem]
    socialMediaAvailability: list[SocialHandleResult]
    googleCompetition: GoogleCompetition


class BrandReport(TypedDict):
    """Full brand viability report. This is the value stored in the cache."""

    brandName: str
    overallScore: int
    recommendation: str
    scores: ScoreSet
    keyInsights: list[Insight]
    detailedAnalysis: DetailedAnalysis
    cached: bool
    analysisTime: str
    cacheTime: str | None


class CompetitorMetrics(TypedDict):
    """Structural SEO metrics for one competitor page.

    The key set is fixed: totalDataPoints counts keys per record.
    """

    url: str
    title: str
    metaDescription: str
    h1: str
    h2Count: int
    h3Count: int
    wordCount: int
    internalLinks: int
    externalLinks: int
    hasSSL: bool
    images: int
    imagesWithAlt: int
    socialLinks: int
    metaKeywords: str | None
    schemaMarkup: bool
    canonicalUrl: str | None
    metaRobots: str | None


class CompetitorNarrative(TypedDict):
    competitorUrl: str
    analysis: str
    competitorData: CompetitorMetrics


class DeepScanReport(TypedDict):
    brandName: str
    competitors: list[CompetitorMetrics]
    aiAnalyses: list[CompetitorNarrative]
    totalDataPoints: int
    timestamp: str


class FetchedPage(TypedDict):
    final_url: str
    html: str


class UsageStats(TypedDict):
    totalAnalyses: int
    cacheHits: int
    newAnalyses: int
    uniqueBrands: int


class PopularBrand(TypedDict):
    brandName: str
    hitCount: int
    lastAccessed: str


# --- Collaborator interfaces -------------------------------------------------


class AnalysisCache(Protocol):
    def get_cached_analysis(self, brand_name: str) -> BrandReport | None: ...

    def cache_analysis(self, brand_name: str, report: BrandReport) -> bool: ...

    def update_hit_count(self, brand_name: str) -> bool: ...


class AnalyticsSink(Protocol):
    def update_analytics(self, action: str, brand_name: str | None = None, extra: dict | None = None) -> bool: ...


class PageFetcher(Protocol):
    def __call__(self, url: str) -> FetchedPage: ...


class NarrativeProvider(Protocol):
    def complete(self, prompt: str) -> str: ...
