"""Search results from the Google Custom Search JSON API.

Returns an empty list when the API is not configured or the call fails.
"""

import logging
import os
from pathlib import Path

import requests
from dotenv import load_dotenv

from models import SearchResult

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"
GOOGLE_SEARCH_API_KEY = os.getenv("GOOGLE_SEARCH_API_KEY", "").strip()
GOOGLE_SEARCH_CX = os.getenv("GOOGLE_SEARCH_CX", "").strip()
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))


def search(query: str) -> list[SearchResult]:
    """Exact-phrase search for `query`, relevance order preserved. Never raises."""
    if not GOOGLE_SEARCH_API_KEY or not GOOGLE_SEARCH_CX:
        logger.warning(
            "SEARCH: api_key or cx is not set. api_key=%s cx=%s",
            bool(GOOGLE_SEARCH_API_KEY),
            bool(GOOGLE_SEARCH_CX),
        )
        return []

    params = {
        "key": GOOGLE_SEARCH_API_KEY,
        "cx": GOOGLE_SEARCH_CX,
        "q": f'"{query}"',
    }

    try:
        response = requests.get(GOOGLE_CSE_URL, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("SEARCH: request failed for %r: %s", query, exc)
        return []

    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        return []

    results: list[SearchResult] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        link = str(item.get("link") or "").strip()
        if not link:
            continue
        results.append(
            {
                "title": str(item.get("title") or ""),
                "link": link,
                "snippet": str(item.get("snippet") or ""),
            }
        )

    logger.info("SEARCH: %s results for %r", len(results), query)
    return results
