import pytest
import requests

import domain_checker
import search_client


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def godaddy_credentials(monkeypatch):
    monkeypatch.setattr(domain_checker, "GODADDY_API_KEY", "key")
    monkeypatch.setattr(domain_checker, "GODADDY_API_SECRET", "secret")


@pytest.fixture
def cse_credentials(monkeypatch):
    monkeypatch.setattr(search_client, "GOOGLE_SEARCH_API_KEY", "key")
    monkeypatch.setattr(search_client, "GOOGLE_SEARCH_CX", "cx")


def test_candidate_domains_order():
    assert domain_checker.candidate_domains("acme") == [
        "acme.com",
        "acme.io",
        "acme.ai",
        "acme.co",
        "acme.org",
        "acme.net",
    ]


def test_check_domain_success(monkeypatch, godaddy_credentials):
    captured = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        captured.update(url=url, params=params, headers=headers, timeout=timeout)
        return _FakeResponse({"domain": "ACME.COM", "available": True, "price": 1199})

    monkeypatch.setattr(domain_checker.requests, "get", fake_get)

    assert domain_checker.check_domain("acme.com") == {"domain": "acme.com", "available": True, "error": False}
    assert captured["params"] == {"domain": "acme.com"}
    assert captured["headers"]["Authorization"] == "sso-key key:secret"
    assert captured["timeout"] == domain_checker.REQUEST_TIMEOUT_SECONDS


@pytest.mark.parametrize(
    "behaviour",
    [
        requests.Timeout("slow"),
        requests.ConnectionError("down"),
        _FakeResponse({"code": "UNABLE_TO_AUTHENTICATE"}, status_code=401),
        _FakeResponse(ValueError("not json")),
    ],
)
def test_check_domain_failures_are_pessimistic(monkeypatch, godaddy_credentials, behaviour):
    def fake_get(*args, **kwargs):
        if isinstance(behaviour, Exception):
            raise behaviour
        return behaviour

    monkeypatch.setattr(domain_checker.requests, "get", fake_get)

    assert domain_checker.check_domain("acme.com") == {"domain": "acme.com", "available": False, "error": True}


def test_check_domain_without_credentials(monkeypatch):
    monkeypatch.setattr(domain_checker, "GODADDY_API_KEY", "")

    def fail(*args, **kwargs):
        raise AssertionError("should not call the registrar")

    monkeypatch.setattr(domain_checker.requests, "get", fail)

    assert domain_checker.check_domain("acme.com")["error"] is True


def test_check_domains_one_result_per_domain(monkeypatch, godaddy_credentials):
    def fake_get(url, params=None, headers=None, timeout=None):
        if params["domain"] == "acme.io":
            raise requests.Timeout("slow")
        return _FakeResponse({"available": params["domain"] == "acme.ai"})

    monkeypatch.setattr(domain_checker.requests, "get", fake_get)

    results = domain_checker.check_domains(domain_checker.candidate_domains("acme"))

    assert [r["domain"] for r in results] == domain_checker.candidate_domains("acme")
    assert results[1] == {"domain": "acme.io", "available": False, "error": True}
    assert results[2]["available"] is True


def test_search_unconfigured_returns_empty(monkeypatch):
    monkeypatch.setattr(search_client, "GOOGLE_SEARCH_API_KEY", "")
    assert search_client.search("acme") == []


def test_search_normalizes_items(monkeypatch, cse_credentials):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured["params"] = params
        return _FakeResponse(
            {
                "items": [
                    {"title": "Acme", "link": "https://acme.com", "snippet": "Tools", "kind": "x"},
                    {"title": "No link"},
                    {"title": "Wiki", "link": "https://en.wikipedia.org/wiki/Acme"},
                ]
            }
        )

    monkeypatch.setattr(search_client.requests, "get", fake_get)

    results = search_client.search("acme")

    assert captured["params"]["q"] == '"acme"'
    assert results == [
        {"title": "Acme", "link": "https://acme.com", "snippet": "Tools"},
        {"title": "Wiki", "link": "https://en.wikipedia.org/wiki/Acme", "snippet": ""},
    ]


def test_search_failure_returns_empty(monkeypatch, cse_credentials):
    def fake_get(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(search_client.requests, "get", fake_get)
    assert search_client.search("acme") == []


def test_search_without_items_returns_empty(monkeypatch, cse_credentials):
    monkeypatch.setattr(search_client.requests, "get", lambda *a, **k: _FakeResponse({"searchInformation": {}}))
    assert search_client.search("acme") == []
