"""Deep Scan: analyze competitor pages and generate a strategic narrative per competitor.

Pipeline: deduplicate URLs by root domain -> fetch + parse up to 5 pages
concurrently -> one LLM narrative per analyzed competitor -> aggregate.
A failing competitor (fetch or narrative) is logged and skipped; the scan
only fails when no page at all could be analyzed.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlparse

import scraper
from ai_service import build_analysis_prompt
from errors import PipelineExhausted
from models import CompetitorMetrics, CompetitorNarrative, DeepScanReport, NarrativeProvider, PageFetcher

logger = logging.getLogger(__name__)

MAX_COMPETITORS = 5
NO_COMPETITOR_DATA = "No competitor data could be analyzed"


def extract_root_domain(hostname: str) -> str:
    """
    Keep the last two labels: dashboard.stripe.com -> stripe.com.
    Wrong for multi-label public suffixes (shop.example.co.uk -> co.uk).
    """
    parts = [part for part in hostname.lower().split(".") if part]
    if len(parts) >= 2:
        return ".".join(parts[-2:])
    return hostname.lower()


def deduplicate_by_domain(urls: list[str]) -> list[str]:
    """
    One URL per root domain, first-seen order of root domains.
    The apex host (hostname == root domain) wins over subdomain URLs.
    """
    selected: dict[str, tuple[str, bool]] = {}
    skipped: list[str] = []

    for raw_url in urls:
        clean_url = scraper.ensure_scheme(str(raw_url or ""))
        try:
            hostname = (urlparse(clean_url).hostname or "").lower()
        except ValueError as exc:
            logger.warning("DEEP SCAN: cannot parse URL %r: %s", raw_url, exc)
            continue
        if not hostname:
            logger.warning("DEEP SCAN: cannot parse URL %r: no hostname", raw_url)
            continue

        root_domain = extract_root_domain(hostname)
        is_apex = hostname == root_domain

        if root_domain not in selected:
            selected[root_domain] = (clean_url, is_apex)
            continue

        existing_url, existing_is_apex = selected[root_domain]
        if is_apex and not existing_is_apex:
            skipped.append(existing_url)
            selected[root_domain] = (clean_url, is_apex)
        else:
            skipped.append(clean_url)

    unique_urls = [url for url, _ in selected.values()]
    logger.info("DEEP SCAN: deduplication %s URLs -> %s unique competitors", len(urls), len(unique_urls))
    if skipped:
        logger.info("DEEP SCAN: skipped duplicate domains: %s", ", ".join(skipped))
    return unique_urls


@dataclass
class DeepScanOutcome:
    success: bool
    data: DeepScanReport | None = None
    error: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeepScanService:
    def __init__(
        self,
        narrative_provider: NarrativeProvider,
        fetch_page: PageFetcher = scraper.fetch_page,
        max_competitors: int = MAX_COMPETITORS,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.narrative_provider = narrative_provider
        self.fetch_page = fetch_page
        self.max_competitors = max_competitors
        self._now = now

    def analyze_page(self, url: str) -> CompetitorMetrics:
        """Fetch one page and parse it. Raises on fetch failure."""
        page = self.fetch_page(url)
        metrics = scraper.extract_metrics(page["final_url"], page["html"])
        logger.info(
            "DEEP SCAN: %s -> %s words, %s internal links",
            metrics["url"],
            metrics["wordCount"],
            metrics["internalLinks"],
        )
        return metrics

    def analyze_competitors(self, urls: list[str]) -> list[CompetitorMetrics]:
        """Fetch and parse each URL concurrently; failures are dropped, order is kept."""
        if not urls:
            return []

        with ThreadPoolExecutor(max_workers=len(urls)) as pool:
            futures = [pool.submit(self.analyze_page, url) for url in urls]

            results: list[CompetitorMetrics] = []
            for index, (url, future) in enumerate(zip(urls, futures), start=1):
                try:
                    metrics = future.result()
                except Exception as exc:
                    logger.error("DEEP SCAN: failed to analyze %s (%s/%s): %s", url, index, len(urls), exc)
                    continue
                if metrics:
                    results.append(metrics)
        return results

    def generate_narrative(self, metrics: CompetitorMetrics, brand_name: str) -> str:
        domain = urlparse(metrics["url"]).hostname or metrics["url"]
        prompt = build_analysis_prompt(metrics, brand_name, domain)
        return self.narrative_provider.complete(prompt)

    def generate_narratives(self, competitors: list[CompetitorMetrics], brand_name: str) -> list[CompetitorNarrative]:
        narratives: list[CompetitorNarrative] = []
        for index, competitor in enumerate(competitors, start=1):
            logger.info("DEEP SCAN: AI analysis %s/%s: %s", index, len(competitors), competitor["url"])
            try:
                analysis = self.generate_narrative(competitor, brand_name)
            except Exception as exc:
                logger.error("DEEP SCAN: AI analysis failed for %s: %s", competitor["url"], exc)
                continue
            narratives.append(
                {
                    "competitorUrl": competitor["url"],
                    "analysis": analysis,
                    "competitorData": competitor,
                }
            )
        return narratives

    def run(self, competitor_urls: list[str], brand_name: str) -> DeepScanReport:
        """Run the full pipeline. Raises PipelineExhausted when no page could be analyzed."""
        logger.info("DEEP SCAN: starting multi-competitor scan for %s with %s URLs", brand_name, len(competitor_urls))
        unique_urls = deduplicate_by_domain(competitor_urls)
        to_process = unique_urls[: self.max_competitors]

        competitors = self.analyze_competitors(to_process)
        if not competitors:
            raise PipelineExhausted(NO_COMPETITOR_DATA)

        total_data_points = 0
        for competitor in competitors:
            total_data_points += len(competitor)

        logger.info("DEEP SCAN: analyzed %s competitors", len(competitors))
        narratives = self.generate_narratives(competitors, brand_name)

        return {
            "brandName": brand_name,
            "competitors": competitors,
            "aiAnalyses": narratives,
            "totalDataPoints": total_data_points,
            "timestamp": self._now().isoformat(),
        }

    def perform_multiple_deep_scan(self, competitor_urls: list[str], brand_name: str) -> DeepScanOutcome:
        """Like run(), but reports pipeline exhaustion as an unsuccessful outcome."""
        try:
            report = self.run(competitor_urls, brand_name)
        except PipelineExhausted as exc:
            return DeepScanOutcome(success=False, error=str(exc))
        return DeepScanOutcome(success=True, data=report)
