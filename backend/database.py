"""SQLite cache and usage analytics storage.

Table: brand_analyses
- cache_key (text, primary key) - normalized brand name
- brand_name (text)
- analysis_json (text) - the BrandReport as returned to the client
- timestamp (text) - ISO time of the last fresh computation
- hit_count (integer)
- last_accessed (text)

Table: usage_analytics
- id (integer, primary key)
- action (text)
- brand_name (text, nullable)
- timestamp (text)
- extra_json (text)

Storage errors are logged and swallowed: a failed read is a cache miss and a
failed analytics write is dropped.
"""

import json
import logging
import os
import sqlite3
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from models import BrandReport, PopularBrand, UsageStats

logger = logging.getLogger(__name__)

DB_PATH = Path(os.getenv("BRAND_DB_PATH", "") or Path(__file__).parent / "brand_analyzer.db")
CACHE_TTL_DAYS = float(os.getenv("CACHE_TTL_DAYS", "7"))


def generate_cache_key(brand_name: str) -> str:
    return brand_name.lower().strip()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BrandStore:
    """Cache collaborator and analytics sink backed by one SQLite file."""

    def __init__(
        self,
        db_path: Path | str = DB_PATH,
        ttl: timedelta = timedelta(days=CACHE_TTL_DAYS),
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.db_path = Path(db_path)
        self.ttl = ttl
        self._now = now

    def get_connection(self) -> sqlite3.Connection:
        """Return a connection to the SQLite database."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self.get_connection()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS brand_analyses (
                    cache_key TEXT PRIMARY KEY,
                    brand_name TEXT NOT NULL,
                    analysis_json TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    hit_count INTEGER NOT NULL DEFAULT 1,
                    last_accessed TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS usage_analytics (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    action TEXT NOT NULL,
                    brand_name TEXT,
                    timestamp TEXT NOT NULL,
                    extra_json TEXT NOT NULL DEFAULT '{}'
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # --- cache ---------------------------------------------------------------

    def get_cached_analysis(self, brand_name: str) -> BrandReport | None:
        """Return the cached report marked cached=True, or None when missing or expired."""
        cache_key = generate_cache_key(brand_name)
        try:
            conn = self.get_connection()
            try:
                row = conn.execute(
                    "SELECT analysis_json, timestamp FROM brand_analyses WHERE cache_key = ?",
                    (cache_key,),
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("CACHE: read failed for %s: %s", cache_key, exc)
            return None

        if row is None:
            logger.info("CACHE: no entry for brand: %s", cache_key)
            return None

        try:
            cache_time = datetime.fromisoformat(row["timestamp"])
            analysis = json.loads(row["analysis_json"])
        except (TypeError, ValueError) as exc:
            logger.error("CACHE: corrupt entry for %s: %s", cache_key, exc)
            return None

        if self._now() - cache_time >= self.ttl:
            logger.info("CACHE: expired for brand: %s", cache_key)
            return None

        logger.info("CACHE: hit for brand: %s", cache_key)
        analysis["cached"] = True
        analysis["cacheTime"] = row["timestamp"]
        return analysis

    def cache_analysis(self, brand_name: str, report: BrandReport) -> bool:
        """Store (or replace) the report for this brand."""
        cache_key = generate_cache_key(brand_name)
        timestamp = self._now().isoformat()
        try:
            conn = self.get_connection()
            try:
                conn.execute(
                    """
                    INSERT INTO brand_analyses (cache_key, brand_name, analysis_json, timestamp, hit_count, last_accessed)
                    VALUES (?, ?, ?, ?, 1, ?)
                    ON CONFLICT(cache_key) DO UPDATE SET
                        brand_name = excluded.brand_name,
                        analysis_json = excluded.analysis_json,
                        timestamp = excluded.timestamp,
                        hit_count = brand_analyses.hit_count + 1,
                        last_accessed = excluded.last_accessed
                    """,
                    (cache_key, brand_name, json.dumps(report), timestamp, timestamp),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.error("CACHE: write failed for %s: %s", cache_key, exc)
            return False

        logger.info("CACHE: stored analysis for brand: %s", cache_key)
        return True

    def update_hit_count(self, brand_name: str) -> bool:
        cache_key = generate_cache_key(brand_name)
        try:
            conn = self.get_connection()
            try:
                conn.execute(
                    "UPDATE brand_analyses SET hit_count = hit_count + 1, last_accessed = ? WHERE cache_key = ?",
                    (self._now().isoformat(), cache_key),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("CACHE: hit count update failed for %s: %s", cache_key, exc)
            return False
        return True

    # --- analytics -----------------------------------------------------------

    def update_analytics(self, action: str, brand_name: str | None = None, extra: dict | None = None) -> bool:
        """Append one usage event. Best-effort."""
        try:
            conn = self.get_connection()
            try:
                conn.execute(
                    "INSERT INTO usage_analytics (action, brand_name, timestamp, extra_json) VALUES (?, ?, ?, ?)",
                    (action, brand_name, self._now().isoformat(), json.dumps(extra or {}, default=str)),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("ANALYTICS: failed to record %s: %s", action, exc)
            return False

        logger.info("ANALYTICS: tracked %s for %s", action, brand_name or "system")
        return True

    def get_popular_brands(self, limit: int = 10) -> list[PopularBrand]:
        safe_limit = max(1, min(100, int(limit)))
        try:
            conn = self.get_connection()
            try:
                rows = conn.execute(
                    """
                    SELECT brand_name, hit_count, COALESCE(last_accessed, timestamp) AS last_accessed
                    FROM brand_analyses
                    ORDER BY hit_count DESC, cache_key ASC
                    LIMIT ?
                    """,
                    (safe_limit,),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("ANALYTICS: popular brands query failed: %s", exc)
            return []

        return [
            {"brandName": row["brand_name"], "hitCount": row["hit_count"], "lastAccessed": row["last_accessed"]}
            for row in rows
        ]

    def get_usage_stats(self) -> UsageStats:
        """Cache hits vs fresh analyses over the last 24 hours."""
        since = (self._now() - timedelta(hours=24)).isoformat()
        stats: UsageStats = {"totalAnalyses": 0, "cacheHits": 0, "newAnalyses": 0, "uniqueBrands": 0}
        try:
            conn = self.get_connection()
            try:
                rows = conn.execute(
                    "SELECT action, brand_name FROM usage_analytics WHERE timestamp >= ?",
                    (since,),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("ANALYTICS: usage stats query failed: %s", exc)
            return stats

        brands: set[str] = set()
        for row in rows:
            if row["action"] == "cache_hit":
                stats["cacheHits"] += 1
            elif row["action"] == "analysis_cached":
                stats["newAnalyses"] += 1
            if row["brand_name"]:
                brands.add(row["brand_name"])

        stats["totalAnalyses"] = stats["cacheHits"] + stats["newAnalyses"]
        stats["uniqueBrands"] = len(brands)
        return stats
