"""Social handle availability heuristic.

There is no verified probe behind this: well-known brands are always taken,
everything else gets a length-weighted coin flip per platform.
"""

import logging
import random

from models import SocialHandleResult

logger = logging.getLogger(__name__)

PLATFORMS = [
    {"name": "Instagram", "url": "https://www.instagram.com/{handle}/", "icon": "fab fa-instagram"},
    {"name": "Twitter", "url": "https://twitter.com/{handle}", "icon": "fab fa-twitter"},
    {"name": "TikTok", "url": "https://www.tiktok.com/@{handle}", "icon": "fab fa-tiktok"},
    {"name": "LinkedIn", "url": "https://www.linkedin.com/in/{handle}", "icon": "fab fa-linkedin"},
    {"name": "YouTube", "url": "https://www.youtube.com/@{handle}", "icon": "fab fa-youtube"},
]

WELL_KNOWN_BRANDS = {"netflix", "google", "apple", "microsoft", "amazon", "facebook", "twitter"}

# (max name length, chance the handle is free)
LENGTH_BUCKETS = [(4, 0.2), (6, 0.4), (8, 0.6)]
LONG_NAME_CHANCE = 0.8


def availability_chance(brand_name: str) -> float:
    length = len(brand_name)
    for max_length, chance in LENGTH_BUCKETS:
        if length <= max_length:
            return chance
    return LONG_NAME_CHANCE


def _is_available(brand_name: str, rng: random.Random) -> bool:
    if brand_name.lower() in WELL_KNOWN_BRANDS:
        return False
    return rng.random() < availability_chance(brand_name)


def error_result(platform: dict, brand_name: str) -> SocialHandleResult:
    return {
        "platform": platform["name"],
        "handle": f"@{brand_name}",
        "url": platform["url"].format(handle=brand_name),
        "available": False,
        "status": "Error",
        "icon": platform["icon"],
        "error": True,
    }


def unavailable_results(brand_name: str) -> list[SocialHandleResult]:
    """Every platform marked as an errored, taken handle."""
    return [error_result(platform, brand_name) for platform in PLATFORMS]


class SocialHandleChecker:
    """Produce one SocialHandleResult per tracked platform."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def __call__(self, brand_name: str) -> list[SocialHandleResult]:
        return self.check(brand_name)

    def check(self, brand_name: str) -> list[SocialHandleResult]:
        results: list[SocialHandleResult] = []
        for platform in PLATFORMS:
            url = platform["url"].format(handle=brand_name)
            try:
                available = self._probe(brand_name)
            except Exception as exc:
                logger.error("SOCIAL CHECK: %s failed for %s: %s", platform["name"], brand_name, exc)
                results.append(error_result(platform, brand_name))
                continue

            results.append(
                {
                    "platform": platform["name"],
                    "handle": f"@{brand_name}",
                    "url": url,
                    "available": available,
                    "status": 404 if available else 200,
                    "icon": platform["icon"],
                    "error": False,
                }
            )

        logger.info(
            "SOCIAL CHECK: %s -> %s",
            brand_name,
            ", ".join(f"{r['platform']}={'available' if r['available'] else 'taken'}" for r in results),
        )
        return results

    def _probe(self, brand_name: str) -> bool:
        return _is_available(brand_name, self._rng)


def check_social_handles(brand_name: str) -> list[SocialHandleResult]:
    return SocialHandleChecker().check(brand_name)
