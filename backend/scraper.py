"""Competitor page fetcher: fetch URL and extract structural SEO metrics.

fetch_page() does the network part and raises UpstreamUnavailable on any
failure; extract_metrics() is a pure parse of already-fetched HTML.
Does NOT crawl subpages. DeepScanService composes the two.
"""

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from errors import UpstreamUnavailable
from models import CompetitorMetrics, FetchedPage

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

DEEP_SCAN_TIMEOUT_SECONDS = float(os.getenv("DEEP_SCAN_TIMEOUT_SECONDS", "10"))
DEEP_SCAN_MAX_REDIRECTS = int(os.getenv("DEEP_SCAN_MAX_REDIRECTS", "5"))

_REQUEST_HEADERS = {
    "User-Agent": "VeritoLabBot/1.0 (+https://veritolab.com/bot)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

SOCIAL_PLATFORM_HOSTS = (
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "linkedin.com",
    "youtube.com",
    "tiktok.com",
)

NO_TITLE = "No title found"
NO_META_DESCRIPTION = "No meta description found"
NO_H1 = "No H1 found"


def ensure_scheme(url: str) -> str:
    value = url.strip()
    if not value.lower().startswith(("http://", "https://")):
        value = f"https://{value}"
    return value


def fetch_page(
    url: str,
    timeout: float = DEEP_SCAN_TIMEOUT_SECONDS,
    max_redirects: int = DEEP_SCAN_MAX_REDIRECTS,
) -> FetchedPage:
    """
    GET `url` following at most `max_redirects` redirects.
    Returns the post-redirect URL and the decoded HTML.
    """
    target = ensure_scheme(url)
    try:
        with requests.Session() as session:
            session.max_redirects = max_redirects
            response = session.get(target, headers=_REQUEST_HEADERS, timeout=timeout)
            response.raise_for_status()
            # requests assumes ISO-8859-1 for text/* without a charset
            if "charset" not in response.headers.get("Content-Type", "").lower():
                response.encoding = response.apparent_encoding or "utf-8"
            html = response.text
            final_url = response.url or target
    except (requests.RequestException, ValueError, OSError) as exc:
        raise UpstreamUnavailable(f"Failed to analyze {target}: {exc}") from exc

    logger.info("SCRAPER: fetched %s -> %s", target, final_url)
    return {"final_url": final_url, "html": html}


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def count_links(soup: BeautifulSoup, page_url: str) -> tuple[int, int]:
    """
    Return (internal, external) link counts.
    Internal: root-relative href or same host as the page.
    External: absolute http(s) href pointing at another host.
    """
    page_host = _host(page_url)
    internal = 0
    external = 0
    for anchor in soup.find_all("a", href=True):
        href = (anchor["href"] or "").strip()
        if not href:
            continue
        if href.startswith("/") and not href.startswith("//"):
            internal += 1
            continue
        if href.startswith("//"):
            href = f"https:{href}"
        if not href.lower().startswith(("http://", "https://")):
            continue
        if _host(href) == page_host:
            internal += 1
        else:
            external += 1
    return internal, external


def count_social_links(soup: BeautifulSoup) -> int:
    count = 0
    for anchor in soup.find_all("a", href=True):
        href = (anchor["href"] or "").lower()
        if any(platform in href for platform in SOCIAL_PLATFORM_HOSTS):
            count += 1
    return count


def estimate_word_count(text: str) -> int:
    return len([word for word in text.split() if word])


def extract_metrics(final_url: str, html: str) -> CompetitorMetrics:
    """Parse fetched HTML into a CompetitorMetrics record with a fixed key set."""
    soup = BeautifulSoup(html or "", "html.parser")

    # Structured data lives in <script>, check before stripping scripts
    schema_markup = soup.find("script", attrs={"type": "application/ld+json"}) is not None

    title = ""
    if soup.title:
        title = " ".join(soup.title.get_text(" ").split())

    meta_description = _meta_content(soup, name="description") or _meta_content(soup, property="og:description")

    first_h1 = soup.find("h1")
    h1 = " ".join(first_h1.get_text(" ").split()) if first_h1 else ""

    canonical_url = None
    canonical_tag = soup.find("link", attrs={"rel": "canonical"})
    if canonical_tag and canonical_tag.get("href"):
        canonical_url = canonical_tag["href"].strip() or None

    internal_links, external_links = count_links(soup, final_url)
    images = soup.find_all("img")

    for tag in soup.find_all(["script", "style", "noscript"]):
        tag.decompose()
    body = soup.body or soup
    word_count = estimate_word_count(body.get_text(separator=" "))

    return {
        "url": final_url,
        "title": title or NO_TITLE,
        "metaDescription": meta_description or NO_META_DESCRIPTION,
        "h1": h1 or NO_H1,
        "h2Count": len(soup.find_all("h2")),
        "h3Count": len(soup.find_all("h3")),
        "wordCount": word_count,
        "internalLinks": internal_links,
        "externalLinks": external_links,
        "hasSSL": urlparse(final_url).scheme == "https",
        "images": len(images),
        "imagesWithAlt": len([img for img in images if img.has_attr("alt")]),
        "socialLinks": count_social_links(soup),
        "metaKeywords": _meta_content(soup, name="keywords"),
        "schemaMarkup": schema_markup,
        "canonicalUrl": canonical_url,
        "metaRobots": _meta_content(soup, name="robots"),
    }
