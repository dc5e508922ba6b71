"""Brand analysis pipeline: cache lookup -> concurrent signal fan-out -> scoring -> cache write."""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone

import domain_checker
import scoring
import search_client
import social_checker
from errors import AnalysisFailed, InputInvalid
from models import (
    AnalysisCache,
    AnalyticsSink,
    BrandReport,
    DomainCheckResult,
    SearchResult,
    SocialHandleResult,
)

logger = logging.getLogger(__name__)

TOP_RESULTS_IN_REPORT = 5


def normalize_brand_name(raw: object) -> str:
    """Trim and lower-case. Raises InputInvalid for an empty name."""
    normalized = str(raw or "").strip().lower()
    if not normalized:
        raise InputInvalid("brandName parameter is required")
    return normalized


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _result_or(future: Future, source: str, fallback: Callable[[], list]) -> list:
    try:
        return future.result()
    except Exception as exc:
        logger.error("ANALYZE: %s failed, using pessimistic default: %s", source, exc)
        return fallback()


class BrandAnalyzer:
    """Produce a BrandReport for one brand name, reusing cached reports within their TTL."""

    def __init__(
        self,
        cache: AnalysisCache,
        analytics: AnalyticsSink,
        domain_check: Callable[[list[str]], list[DomainCheckResult]] = domain_checker.check_domains,
        search: Callable[[str], list[SearchResult]] = search_client.search,
        social_check: Callable[[str], list[SocialHandleResult]] = social_checker.check_social_handles,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cache = cache
        self.analytics = analytics
        self.domain_check = domain_check
        self.search = search
        self.social_check = social_check
        self._now = now

    def analyze_brand(self, brand_name: str) -> BrandReport:
        brand = normalize_brand_name(brand_name)

        try:
            cached = self.cache.get_cached_analysis(brand)
            if cached is not None:
                logger.info("ANALYZE: returning cached result for: %s", brand)
                self.cache.update_hit_count(brand)
                self.analytics.update_analytics("cache_hit", brand)
                return cached

            logger.info("ANALYZE: performing fresh analysis for: %s", brand)
            self.analytics.update_analytics("fresh_analysis_started", brand)

            report = self._fresh_report(brand)

            if self.cache.cache_analysis(brand, report):
                self.analytics.update_analytics("analysis_cached", brand)
            self.analytics.update_analytics(
                "fresh_analysis_completed",
                brand,
                {"overallScore": report["overallScore"], "hasErrors": False},
            )
            return report
        except Exception as exc:
            logger.exception("ANALYZE: failed for %s", brand)
            self.analytics.update_analytics("analysis_error", brand, {"error": str(exc)})
            raise AnalysisFailed("An error occurred during analysis.") from exc

    def gather_signals(
        self, brand: str
    ) -> tuple[list[DomainCheckResult], list[SearchResult], list[SocialHandleResult]]:
        """Run the three adapters concurrently and wait for all of them.

        An adapter that raises contributes the value it returns on upstream failure:
        every domain errored, no search results, every handle errored.
        """
        domains = domain_checker.candidate_domains(brand)
        with ThreadPoolExecutor(max_workers=3) as pool:
            domain_future = pool.submit(self.domain_check, domains)
            search_future = pool.submit(self.search, brand)
            social_future = pool.submit(self.social_check, brand)

            domain_data = _result_or(
                domain_future, "domain check", lambda: [domain_checker.failed_result(d) for d in domains]
            )
            search_data = _result_or(search_future, "search", list)
            social_data = _result_or(social_future, "social check", lambda: social_checker.unavailable_results(brand))

        logger.info(
            "ANALYZE: raw data for %s: domains=%s search=%s social=%s",
            brand,
            len(domain_data),
            len(search_data),
            len(social_data),
        )
        return domain_data, search_data, social_data

    def _fresh_report(self, brand: str) -> BrandReport:
        domain_data, search_data, social_data = self.gather_signals(brand)

        scores = scoring.calculate_scores(domain_data, search_data, social_data, brand)
        overall = scoring.overall_score(scores)
        logger.info("ANALYZE: scores for %s: %s overall=%s", brand, scores, overall)

        return {
            "brandName": brand,
            "overallScore": overall,
            "recommendation": scoring.generate_recommendation(overall),
            "scores": scores,
            "keyInsights": scoring.generate_insights(scores, domain_data, brand, social_data),
            "detailedAnalysis": {
                "domainAvailability": [
                    {"domain": d["domain"], "isAvailable": bool(d.get("available")) and not d.get("error")}
                    for d in domain_data
                ],
                "socialMediaAvailability": social_data,
                "googleCompetition": {
                    "topResults": [
                        {"title": r["title"], "link": r["link"], "snippet": r["snippet"]}
                        for r in search_data[:TOP_RESULTS_IN_REPORT]
                    ]
                },
            },
            "cached": False,
            "analysisTime": self._now().isoformat(),
            "cacheTime": None,
        }
