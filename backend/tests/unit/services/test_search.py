"""
Unit tests for the SERP API search service. The network call is replaced.
"""
import pytest
from tenacity import wait_none

from vc_dossier.services import search as search_module
from vc_dossier.services.search import SearchService


def _organic(*links):
    return {
        "organic_results": [
            {"title": title, "link": link, "snippet": f"About {title}"} for title, link in links
        ]
    }


@pytest.fixture
def search_service(monkeypatch):
    """SearchService whose SERP API responses are looked up by query"""
    service = SearchService(api_key="test_serp_key", country="in")
    service.responses = {}
    service.params = []

    async def fake_fetch(params):
        service.params.append(params)
        response = service.responses.get(params["q"], {"organic_results": []})
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(service, "_fetch", fake_fetch)
    return service


@pytest.mark.asyncio
async def test_search_returns_organic_results(search_service):
    search_service.responses["Jane Doe Acme LinkedIn"] = _organic(
        ("Jane Doe - Acme Ventures | LinkedIn", "https://in.linkedin.com/in/jane-doe"),
        ("Acme Ventures team", "https://acme.vc/team"),
    )

    results = await search_service.search("Jane Doe Acme LinkedIn", 1)

    assert results == [{
        "title": "Jane Doe - Acme Ventures | LinkedIn",
        "link": "https://in.linkedin.com/in/jane-doe",
        "snippet": "About Jane Doe - Acme Ventures | LinkedIn",
    }]
    assert search_service.params[0]["gl"] == "in"
    assert search_service.params[0]["num"] == 1


@pytest.mark.asyncio
async def test_search_failures_return_empty_list(search_service):
    search_service.responses["broken"] = ConnectionError("network down")
    search_service.responses["quota"] = {"error": "Your account has run out of searches."}

    assert await search_service.search("broken") == []
    assert await search_service.search("quota") == []


@pytest.mark.asyncio
async def test_unconfigured_search_is_empty():
    service = SearchService(api_key="")

    assert service.is_configured is False
    assert await service.search("anything") == []


@pytest.mark.asyncio
async def test_find_homepage_skips_regulator_pages(search_service):
    search_service.responses['"Acme Ventures Fund" official site'] = _organic(
        ("SEBI | Registered AIFs", "https://www.sebi.gov.in/aif"),
        ("Acme", "ftp://acme.vc"),
    )
    search_service.responses['"Acme Ventures Fund" fund website'] = _organic(
        ("Acme Ventures", "https://acme.vc"),
    )

    result = await search_service.find_homepage("Acme Ventures Fund", "IN/AIF2/20-21/0001", "jane@acmevc.in")

    assert result["link"] == "https://acme.vc"


@pytest.mark.asyncio
async def test_find_homepage_falls_back_to_email_domain(search_service):
    result = await search_service.find_homepage("Acme Ventures Fund", None, "jane@acmevc.in")

    assert result == {"link": "https://acmevc.in", "title": "acmevc.in", "snippet": ""}
    assert search_service.params[-1]["q"] == "acmevc.in"


@pytest.mark.asyncio
async def test_find_homepage_without_results_or_email(search_service):
    assert await search_service.find_homepage("Unknown Fund") is None


@pytest.mark.asyncio
async def test_search_retries_client_errors(monkeypatch):
    """Errors raised by the SERP client are retried before giving up"""
    calls = []

    class FailingGoogleSearch:
        def __init__(self, params):
            self.params = params

        def get_dict(self):
            calls.append(self.params["q"])
            raise OSError("connection reset by peer")

    monkeypatch.setattr(search_module, "GoogleSearch", FailingGoogleSearch)
    monkeypatch.setattr(SearchService._fetch.retry, "wait", wait_none())

    assert await SearchService(api_key="k").search("Acme Ventures") == []
    assert calls == ["Acme Ventures"] * 3


@pytest.mark.asyncio
async def test_search_recovers_on_retry(monkeypatch):
    responses = [RuntimeError("HTTPSConnectionPool: Max retries exceeded"), _organic(("Acme", "https://acme.vc"))]

    class FlakyGoogleSearch:
        def __init__(self, params):
            pass

        def get_dict(self):
            response = responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response

    monkeypatch.setattr(search_module, "GoogleSearch", FlakyGoogleSearch)
    monkeypatch.setattr(SearchService._fetch.retry, "wait", wait_none())

    results = await SearchService(api_key="k").search("Acme Ventures")

    assert [r["link"] for r in results] == ["https://acme.vc"]
