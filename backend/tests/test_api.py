import pytest
from fastapi.testclient import TestClient

import main
from brand_analyzer import BrandAnalyzer
from deep_scan import DeepScanService
from tests.conftest import FakeNarrativeProvider, InMemoryStore


@pytest.fixture
def client(sqlite_store, clock):
    def domain_check(domains):
        return [{"domain": d, "available": d.endswith(".com"), "error": False} for d in domains]

    def social_check(brand):
        return []

    def analyzer():
        return BrandAnalyzer(
            cache=sqlite_store,
            analytics=sqlite_store,
            domain_check=domain_check,
            search=lambda q: [],
            social_check=social_check,
            now=clock,
        )

    main.app.dependency_overrides[main.get_store] = lambda: sqlite_store
    main.app.dependency_overrides[main.get_brand_analyzer] = analyzer
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def _use_deep_scan(search_results, unreachable=()):
    def fetch_page(url):
        if url in unreachable:
            raise OSError("unreachable")
        return {"final_url": url, "html": "<title>T</title><h1>H</h1><p>ten words</p>"}

    service = DeepScanService(FakeNarrativeProvider(), fetch_page=fetch_page)
    main.app.dependency_overrides[main.get_deep_scan_service] = lambda: service
    main.app.dependency_overrides[main.get_search] = lambda: (lambda q: search_results)


def _results(*links):
    return [{"title": l, "link": l, "snippet": ""} for l in links]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_analyze_brand_requires_name(client):
    response = client.get("/analyze-brand")
    assert response.status_code == 400
    assert response.json() == {"message": "brandName parameter is required"}


def test_analyze_brand_then_cached(client):
    first = client.get("/analyze-brand", params={"brandName": " Acme "})
    second = client.get("/analyze-brand", params={"brandName": "acme"})

    assert first.status_code == 200
    body = first.json()
    assert body["brandName"] == "acme"
    assert body["cached"] is False
    assert body["scores"]["domainStrength"] == 100
    assert body["overallScore"] == 90
    assert body["recommendation"].startswith("Excellent Prospect")

    cached = second.json()
    assert cached["cached"] is True
    assert cached["cacheTime"]
    assert cached["scores"] == body["scores"]
    assert cached["overallScore"] == body["overallScore"]


def test_analyze_brand_unexpected_failure(client):
    class BrokenCache(InMemoryStore):
        def get_cached_analysis(self, brand_name):
            raise RuntimeError("cache exploded")

    store = BrokenCache()
    main.app.dependency_overrides[main.get_brand_analyzer] = lambda: BrandAnalyzer(cache=store, analytics=store)

    response = client.get("/analyze-brand", params={"brandName": "acme"})

    assert response.status_code == 500
    assert response.json() == {"message": "An error occurred during analysis."}
    assert "cache exploded" not in response.text


def test_analyze_brand_survives_failing_registrar(client, sqlite_store, clock):
    def explode(domains):
        raise RuntimeError("registrar exploded")

    main.app.dependency_overrides[main.get_brand_analyzer] = lambda: BrandAnalyzer(
        cache=sqlite_store,
        analytics=sqlite_store,
        domain_check=explode,
        search=lambda q: [],
        social_check=lambda brand: [],
        now=clock,
    )

    response = client.get("/analyze-brand", params={"brandName": "acme"})

    assert response.status_code == 200
    assert response.json()["scores"]["domainStrength"] == 10


def test_analytics(client):
    client.get("/analyze-brand", params={"brandName": "acme"})
    client.get("/analyze-brand", params={"brandName": "acme"})
    client.get("/analyze-brand", params={"brandName": "acme"})

    body = client.get("/analytics").json()

    assert body["usage"] == {"totalAnalyses": 3, "cacheHits": 2, "newAnalyses": 1, "uniqueBrands": 1}
    assert body["cacheEfficiency"] == 67
    assert body["popularBrands"][0]["brandName"] == "acme"
    assert body["popularBrands"][0]["hitCount"] == 3


def test_analytics_empty(client):
    body = client.get("/analytics").json()
    assert body["cacheEfficiency"] == 0
    assert body["popularBrands"] == []


def test_deep_scan_requires_brand_name(client):
    response = client.post("/deep-scan", json={})
    assert response.status_code == 400
    assert "brandName" in response.json()["message"]


def test_deep_scan_without_body_is_a_bad_request(client):
    response = client.post("/deep-scan")
    assert response.status_code == 400
    assert response.json() == {"message": "Missing required parameter: brandName"}


def test_deep_scan_without_competitors(client):
    _use_deep_scan([])
    response = client.post("/deep-scan", json={"brandName": "acme"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_deep_scan_partial_success(client, sqlite_store):
    links = [f"https://site{i}.com/" for i in range(5)]
    _use_deep_scan(_results(*links), unreachable={links[0], links[2]})

    response = client.post("/deep-scan", json={"brandName": "acme"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [c["url"] for c in body["data"]["competitors"]] == [links[1], links[3], links[4]]
    assert len(body["data"]["aiAnalyses"]) == 3
    assert body["data"]["totalDataPoints"] == 3 * 17


def test_deep_scan_all_unreachable(client):
    links = ["https://a.com/", "https://b.com/"]
    _use_deep_scan(_results(*links), unreachable=set(links))

    response = client.post("/deep-scan", json={"brandName": "acme"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "No competitor data could be analyzed"}


def test_deep_scan_unexpected_error(client):
    def exploding_search(query):
        raise RuntimeError("search exploded")

    main.app.dependency_overrides[main.get_search] = lambda: exploding_search
    main.app.dependency_overrides[main.get_deep_scan_service] = lambda: DeepScanService(FakeNarrativeProvider())

    response = client.post("/deep-scan", json={"brandName": "acme"})

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "search exploded" not in response.text
