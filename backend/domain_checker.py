"""Registrar availability checks via the GoDaddy domains API.

Every failure (missing credentials, network, non-2xx, bad JSON) is folded
into a pessimistic result: available=False, error=True.
"""

import logging
import os
from pathlib import Path

import requests
from dotenv import load_dotenv

from models import DomainCheckResult

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

GODADDY_API_KEY = os.getenv("GODADDY_API_KEY", "").strip()
GODADDY_API_SECRET = os.getenv("GODADDY_API_SECRET", "").strip()
GODADDY_BASE_URL = (
    "https://api.godaddy.com"
    if os.getenv("GODADDY_ENV", "").strip().upper() == "PRODUCTION"
    else "https://api.ote-godaddy.com"
)
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

CANDIDATE_TLDS = [".com", ".io", ".ai", ".co", ".org", ".net"]


def candidate_domains(brand_name: str) -> list[str]:
    """Return brand + TLD for every candidate TLD, in fixed order."""
    return [f"{brand_name}{tld}" for tld in CANDIDATE_TLDS]


def failed_result(domain: str) -> DomainCheckResult:
    return {"domain": domain, "available": False, "error": True}


def check_domain(domain: str) -> DomainCheckResult:
    """Check one domain. Never raises."""
    if not GODADDY_API_KEY or not GODADDY_API_SECRET:
        logger.warning("DOMAIN CHECK: GoDaddy credentials missing, marking %s as errored.", domain)
        return failed_result(domain)

    try:
        response = requests.get(
            f"{GODADDY_BASE_URL}/v1/domains/available",
            params={"domain": domain},
            headers={
                "Authorization": f"sso-key {GODADDY_API_KEY}:{GODADDY_API_SECRET}",
                "Accept": "application/json",
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("DOMAIN CHECK: failed for %s: %s", domain, exc)
        return failed_result(domain)

    if not isinstance(data, dict):
        return failed_result(domain)

    return {
        # the registrar may echo a normalized name; keep ours so lookups by brand+tld still match
        "domain": domain,
        "available": bool(data.get("available", False)),
        "error": False,
    }


def check_domains(domains: list[str]) -> list[DomainCheckResult]:
    """Check each domain in order. One result per input domain."""
    results = [check_domain(domain) for domain in domains]
    logger.info(
        "DOMAIN CHECK: %s",
        ", ".join(f"{r['domain']}={'available' if r['available'] else 'taken'}" for r in results),
    )
    return results
