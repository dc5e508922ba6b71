"""Shared fakes for the backend tests."""

import copy
from datetime import datetime, timezone

import pytest

from database import BrandStore


class InMemoryStore:
    """Cache + analytics fake with the same surface as BrandStore."""

    def __init__(self) -> None:
        self.reports: dict[str, dict] = {}
        self.hit_counts: dict[str, int] = {}
        self.events: list[tuple[str, str | None, dict]] = []

    def get_cached_analysis(self, brand_name):
        report = self.reports.get(brand_name)
        if report is None:
            return None
        cached = copy.deepcopy(report)
        cached["cached"] = True
        cached["cacheTime"] = "2026-01-01T00:00:00+00:00"
        return cached

    def cache_analysis(self, brand_name, report):
        self.reports[brand_name] = copy.deepcopy(report)
        self.hit_counts[brand_name] = self.hit_counts.get(brand_name, 0) + 1
        return True

    def update_hit_count(self, brand_name):
        self.hit_counts[brand_name] = self.hit_counts.get(brand_name, 0) + 1
        return True

    def update_analytics(self, action, brand_name=None, extra=None):
        self.events.append((action, brand_name, extra or {}))
        return True

    def actions(self) -> list[str]:
        return [action for action, _, _ in self.events]


class FakeNarrativeProvider:
    def __init__(self, fail_for: tuple[str, ...] = ()) -> None:
        self.fail_for = fail_for
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        for marker in self.fail_for:
            if marker in prompt:
                raise RuntimeError(f"model unavailable for {marker}")
        return "DEEP SCAN ANALYSIS: ok"


class FixedClock:
    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sqlite_store(tmp_path, clock) -> BrandStore:
    store = BrandStore(db_path=tmp_path / "brands.db", now=clock)
    store.init_db()
    return store
