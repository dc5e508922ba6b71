"""Pydantic schemas for API request/response.

Field names are camelCase to keep the JSON contract the frontend reads.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class DeepScanRequest(BaseModel):
    """Request body for POST /deep-scan."""

    brandName: str = ""

    @field_validator("brandName", mode="before")
    @classmethod
    def normalize_brand_name(cls, value: object) -> str:
        return str(value or "").strip()


class ScoreSetModel(BaseModel):
    domainStrength: int = Field(ge=0, le=100)
    competitionIntensity: int = Field(ge=0, le=100)
    seoDifficulty: int = Field(ge=0, le=100)
    socialMediaAvailability: int = Field(ge=0, le=100)


class InsightItem(BaseModel):
    title: str
    points: str
    description: str
    type: Literal["positive", "negative"]


class DomainAvailabilityItem(BaseModel):
    domain: str
    isAvailable: bool


class SocialHandleItem(BaseModel):
    platform: str
    handle: str
    url: str
    available: bool
    status: int | str
    icon: str
    error: bool = False


class SearchResultItem(BaseModel):
    title: str
    link: str
    snippet: str


class GoogleCompetition(BaseModel):
    topResults: list[SearchResultItem]


class DetailedAnalysis(BaseModel):
    domainAvailability: list[DomainAvailabilityItem]
    socialMediaAvailability: list[SocialHandleItem]
    googleCompetition: GoogleCompetition


class BrandReportResponse(BaseModel):
    """Response for GET /analyze-brand."""

    brandName: str
    overallScore: int = Field(ge=0, le=100)
    recommendation: str
    scores: ScoreSetModel
    keyInsights: list[InsightItem]
    detailedAnalysis: DetailedAnalysis
    cached: bool
    analysisTime: str
    cacheTime: str | None = None


class CompetitorMetricsItem(BaseModel):
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
    metaKeywords: str | None = None
    schemaMarkup: bool
    canonicalUrl: str | None = None
    metaRobots: str | None = None


class CompetitorNarrativeItem(BaseModel):
    competitorUrl: str
    analysis: str
    competitorData: CompetitorMetricsItem


class DeepScanData(BaseModel):
    brandName: str
    competitors: list[CompetitorMetricsItem]
    aiAnalyses: list[CompetitorNarrativeItem]
    totalDataPoints: int
    timestamp: str


class DeepScanResponse(BaseModel):
    """Successful response for POST /deep-scan."""

    success: Literal[True] = True
    data: DeepScanData


class UsageStatsItem(BaseModel):
    totalAnalyses: int
    cacheHits: int
    newAnalyses: int
    uniqueBrands: int


class PopularBrandItem(BaseModel):
    brandName: str
    hitCount: int
    lastAccessed: str | None = None


class AnalyticsResponse(BaseModel):
    """Response for GET /analytics."""

    usage: UsageStatsItem
    popularBrands: list[PopularBrandItem]
    cacheEfficiency: int
