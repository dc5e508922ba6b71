"""Brand viability scoring.

Pure functions: normalized signal data in, 0-100 integers out. Every
function is defined for empty or errored input.
"""

import logging
import math
from urllib.parse import urlparse

from models import DomainCheckResult, Insight, ScoreSet, SearchResult, SocialHandleResult

logger = logging.getLogger(__name__)

PRIMARY_TLD = ".com"
PREFERRED_ALTERNATIVE_TLDS = {".io", ".ai", ".co"}

INFORMATIONAL_DOMAINS = ["wikipedia.org", "wiktionary.org", "forbes.com", "nytimes.com", ".gov", ".edu"]
VERY_HIGH_AUTHORITY_DOMAINS = ["wikipedia.org", "forbes.com", ".gov", ".edu", "github.com", "amazon.com"]
HIGH_AUTHORITY_DOMAINS = ["techcrunch.com", "medium.com", "reddit.com"]

PLATFORM_WEIGHTS = {
    "Instagram": 25,
    "Twitter": 25,
    "TikTok": 20,
    "LinkedIn": 15,
    "YouTube": 15,
}
DEFAULT_PLATFORM_WEIGHT = 10

SCORE_WEIGHTS = {
    "domainStrength": 0.3,
    "competitionIntensity": 0.3,
    "seoDifficulty": 0.2,
    "socialMediaAvailability": 0.2,
}

RECOMMENDATIONS = [
    (80, "Excellent Prospect. A clear path to ownership and market leadership."),
    (60, "Strong Contender. This name is viable but requires a clear strategy."),
    (40, "Challenging. Significant hurdles exist. Proceed with caution."),
]
NOT_RECOMMENDED = "Not Recommended. This name poses major branding challenges."


def clamp_score(score: float) -> int:
    """Round half up and bound to [0, 100]."""
    return max(0, min(100, int(math.floor(score + 0.5))))


def _hostname(link: str) -> str:
    try:
        host = (urlparse(link).hostname or "").lower()
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def _tld_of(domain: str, brand_name: str) -> str:
    if domain.startswith(brand_name):
        return domain[len(brand_name):]
    return ""


def domain_strength(domain_results: list[DomainCheckResult], brand_name: str) -> int:
    primary = next((d for d in domain_results if d.get("domain") == f"{brand_name}{PRIMARY_TLD}"), None)
    if primary is None or primary.get("error"):
        return 10
    if primary.get("available"):
        return 100
    has_alternative = any(
        _tld_of(d.get("domain", ""), brand_name) in PREFERRED_ALTERNATIVE_TLDS
        and d.get("available")
        and not d.get("error")
        for d in domain_results
    )
    return 40 if has_alternative else 10


def is_informational(hostname: str) -> bool:
    return any(marker in hostname for marker in INFORMATIONAL_DOMAINS)


def competition_intensity(search_results: list[SearchResult], brand_name: str) -> int:
    if not search_results:
        return 100
    direct_competitors = []
    for result in search_results[:5]:
        hostname = _hostname(result.get("link", ""))
        if not hostname or is_informational(hostname):
            continue
        if brand_name and brand_name in hostname:
            direct_competitors.append(hostname)
    if direct_competitors:
        logger.debug("SCORING: direct competitors for %s: %s", brand_name, direct_competitors)
        return 20
    return 80 if len(search_results) > 3 else 100


def seo_difficulty(search_results: list[SearchResult]) -> int:
    if not search_results:
        return 100
    top_links = [result.get("link", "") for result in search_results[:3]]
    if any(marker in link for link in top_links for marker in VERY_HIGH_AUTHORITY_DOMAINS):
        return 0
    if any(marker in link for link in top_links for marker in HIGH_AUTHORITY_DOMAINS):
        return 20
    return 100 if len(search_results) < 3 else 60


def social_media_score(social_results: list[SocialHandleResult]) -> int:
    if not social_results:
        return 50
    weighted_available = 0
    total_weight = 0
    for result in social_results:
        weight = PLATFORM_WEIGHTS.get(result.get("platform", ""), DEFAULT_PLATFORM_WEIGHT)
        total_weight += weight
        if result.get("available") and not result.get("error"):
            weighted_available += weight
    if total_weight <= 0:
        return 50
    return clamp_score(100 * weighted_available / total_weight)


def calculate_scores(
    domain_results: list[DomainCheckResult],
    search_results: list[SearchResult],
    social_results: list[SocialHandleResult],
    brand_name: str,
) -> ScoreSet:
    return {
        "domainStrength": clamp_score(domain_strength(domain_results, brand_name)),
        "competitionIntensity": clamp_score(competition_intensity(search_results, brand_name)),
        "seoDifficulty": clamp_score(seo_difficulty(search_results)),
        "socialMediaAvailability": clamp_score(social_media_score(social_results)),
    }


def overall_score(scores: ScoreSet) -> int:
    """Weighted 4-factor score: 0.3 domain, 0.3 competition, 0.2 SEO, 0.2 social."""
    total = sum(scores[key] * weight for key, weight in SCORE_WEIGHTS.items())
    return clamp_score(total)


def generate_recommendation(score: float) -> str:
    for threshold, text in RECOMMENDATIONS:
        if score > threshold:
            return text
    return NOT_RECOMMENDED


def _insight(title: str, points: str, description: str, positive: bool) -> Insight:
    return {
        "title": title,
        "points": points,
        "description": description,
        "type": "positive" if positive else "negative",
    }


def generate_insights(
    scores: ScoreSet,
    domain_results: list[DomainCheckResult],
    brand_name: str,
    social_results: list[SocialHandleResult],
) -> list[Insight]:
    """Fixed rule ladder: domain, social, competition, SEO, in that order."""
    insights: list[Insight] = []

    if scores["domainStrength"] == 100:
        insights.append(_insight("Domain Available", "+40pts", "Primary .com domain is ready to register.", True))
    elif scores["domainStrength"] > 30:
        insights.append(
            _insight("Alternatives Found", "+15pts", "Good alternatives like .io or .ai are available.", True)
        )
    else:
        insights.append(
            _insight("Domain Risk", "-25pts", "The .com and top alternatives are unavailable.", False)
        )

    social = scores["socialMediaAvailability"]
    if social > 80:
        insights.append(
            _insight("Social Gold Mine", "+25pts", "Most major social media handles are available.", True)
        )
    elif social > 50:
        insights.append(
            _insight("Mixed Social Availability", "+10pts", "Some key social platforms available.", True)
        )
    else:
        insights.append(
            _insight("Social Challenges", "-20pts", "Limited social media handle availability.", False)
        )

    if scores["competitionIntensity"] > 90:
        insights.append(
            _insight("Low Competition", "+30pts", "No direct commercial competitors identified.", True)
        )
    elif scores["competitionIntensity"] < 30:
        insights.append(_insight("Risk Alert", "-30pts", "Direct competitors dominate search results.", False))

    if scores["seoDifficulty"] > 90:
        insights.append(
            _insight("SEO Opportunity", "+20pts", "The search landscape is open to rank for this name.", True)
        )
    elif scores["seoDifficulty"] < 30:
        insights.append(
            _insight("High SEO Difficulty", "-20pts", "Ranking will be difficult against authoritative sites.", False)
        )

    return insights
