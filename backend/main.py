"""Brand viability API - FastAPI app and endpoints."""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

import search_client
from ai_service import ClaudeNarrativeProvider
from brand_analyzer import BrandAnalyzer
from database import BrandStore
from deep_scan import DeepScanService
from errors import AnalysisFailed, InputInvalid
from logging_config import setup_logging
from schemas import AnalyticsResponse, BrandReportResponse, DeepScanRequest, DeepScanResponse

logger = logging.getLogger(__name__)

MAX_DEEP_SCAN_URLS = 5


def _cors_allow_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "").strip()
    if not raw:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


app = FastAPI(
    title="Brand Viability API",
    description="Domain, search, social and competitor signals rolled into one brand score",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_store() -> BrandStore:
    store = BrandStore()
    store.init_db()
    return store


def get_brand_analyzer(store: BrandStore = Depends(get_store)) -> BrandAnalyzer:
    return BrandAnalyzer(cache=store, analytics=store)


@lru_cache
def get_deep_scan_service() -> DeepScanService:
    return DeepScanService(narrative_provider=ClaudeNarrativeProvider())


def get_search():
    return search_client.search


@app.on_event("startup")
def startup() -> None:
    setup_logging()
    get_store()


@app.get("/analyze-brand", response_model=BrandReportResponse)
def analyze_brand(brandName: str | None = None, analyzer: BrandAnalyzer = Depends(get_brand_analyzer)):
    """Full brand report, served from cache when a fresh one exists."""
    try:
        return analyzer.analyze_brand(brandName or "")
    except InputInvalid as exc:
        return JSONResponse(status_code=400, content={"message": str(exc)})
    except AnalysisFailed:
        return JSONResponse(status_code=500, content={"message": "An error occurred during analysis."})


@app.get("/analytics", response_model=AnalyticsResponse)
def analytics(store: BrandStore = Depends(get_store)):
    """Usage stats for internal use."""
    usage = store.get_usage_stats()
    popular = store.get_popular_brands(10)
    efficiency = round(usage["cacheHits"] / usage["totalAnalyses"] * 100) if usage["totalAnalyses"] > 0 else 0
    return {"usage": usage, "popularBrands": popular, "cacheEfficiency": efficiency}


@app.post("/deep-scan", response_model=DeepScanResponse)
def deep_scan(
    body: DeepScanRequest | None = None,
    store: BrandStore = Depends(get_store),
    service: DeepScanService = Depends(get_deep_scan_service),
    search=Depends(get_search),
):
    """
    Pipeline: search brand -> top result URLs as competitors -> deep scan -> narratives.
    """
    brand_name = body.brandName if body is not None else ""
    if not brand_name:
        return JSONResponse(status_code=400, content={"message": "Missing required parameter: brandName"})

    try:
        logger.info("DEEP SCAN: requested for brand: %s", brand_name)
        store.update_analytics("deep_scan_started", brand_name)

        search_results = search(brand_name)
        competitor_urls = [result["link"] for result in search_results[:MAX_DEEP_SCAN_URLS]]
        if not competitor_urls:
            return JSONResponse(
                status_code=400,
                content={"success": False, "message": "No competitors found for analysis"},
            )

        outcome = service.perform_multiple_deep_scan(competitor_urls, brand_name)
        if not outcome.success or outcome.data is None:
            store.update_analytics("deep_scan_failed", brand_name, {"error": outcome.error})
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": outcome.error or "Deep scan failed"},
            )

        store.update_analytics(
            "deep_scan_completed",
            brand_name,
            {
                "competitorsAnalyzed": len(outcome.data["competitors"]),
                "totalDataPoints": outcome.data["totalDataPoints"],
                "aiAnalysesGenerated": len(outcome.data["aiAnalyses"]),
            },
        )
        return {"success": True, "data": outcome.data}
    except Exception as exc:
        logger.exception("DEEP SCAN: endpoint error for %s", brand_name)
        store.update_analytics("deep_scan_error", brand_name, {"error": str(exc)})
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "An error occurred during deep scan analysis"},
        )


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "ok"}
