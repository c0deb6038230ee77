"""
Root conftest file for pytest.

This file is automatically loaded by pytest and contains setup
for making imports work correctly in tests, plus the fakes shared by
the agent and pipeline tests.
"""
import os
import sys
from pathlib import Path

import pytest

# Add the backend directory to the Python path for imports
backend_dir = str(Path(__file__).parent.parent)
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# Add the project root to the Python path
project_root = str(Path(__file__).parent.parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from vc_dossier.schemas import FirmRecord, ScrapeOutcome  # noqa: E402
from vc_dossier.services.linkedin import LinkedInScraper  # noqa: E402
from vc_dossier.utils.storage import StorageService  # noqa: E402


class FakeLLM:
    """
    Stands in for LLMService.

    `structured` maps a schema name to the dict to return (or an exception
    to raise); `text` is returned for every free-text call.
    """

    def __init__(self, text="search results", structured=None):
        self.text = text
        self.structured = structured or {}
        self.content_calls = []
        self.structured_calls = []

    async def generate_content(self, prompt, grounded=True):
        self.content_calls.append({"prompt": prompt, "grounded": grounded})
        return self.text

    async def generate_structured(self, prompt, schema, name="result", grounded=False):
        self.structured_calls.append({"prompt": prompt, "name": name})
        value = self.structured.get(name, {})
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(prompt)
        return value


class FakeLinkedIn(LinkedInScraper):
    """LinkedIn provider returning canned items"""

    provider = "fake"

    def __init__(self, profiles=None, companies=None, configured=True):
        self.profiles = profiles or []
        self.companies = companies or []
        self.configured = configured
        self.profile_calls = []
        self.company_calls = []

    def is_configured(self):
        return self.configured

    async def scrape_profiles(self, urls):
        self.profile_calls.append(list(urls))
        items = [p for p in self.profiles if p.get("url") in urls]
        if not items:
            return ScrapeOutcome(success=False, message="No data")
        return ScrapeOutcome(success=True, items=items)

    async def scrape_companies(self, urls):
        self.company_calls.append(list(urls))
        items = [c for c in self.companies if c.get("url") in urls]
        if not items:
            return ScrapeOutcome(success=False, message="No data")
        return ScrapeOutcome(success=True, items=items)


class FakeSearch:
    """SearchService double keyed by query substring"""

    def __init__(self, results=None, configured=True):
        self.results = results or {}
        self.is_configured = configured
        self.queries = []

    async def search(self, query, num=5):
        self.queries.append(query)
        for key, value in self.results.items():
            if key in query:
                return value
        return []

    async def find_homepage(self, name, registration_no=None, email=None):
        self.queries.append(name)
        return self.results.get("homepage")


@pytest.fixture
def firm_record():
    """A SEBI registry row as it appears in inputs.json"""
    return FirmRecord.model_validate({
        "Name": "Acme Ventures Fund",
        "Registration No.": "IN/AIF2/20-21/0001",
        "Contact Person": "Jane Doe",
        "E-mail": "jane@acmevc.in",
        "Address": "Mumbai, Maharashtra",
        "Validity": "Perpetual",
    })


@pytest.fixture
def storage(tmp_path):
    """Storage rooted in a temporary data directory"""
    return StorageService(base_dir=str(tmp_path / "data"))


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def fake_linkedin():
    return FakeLinkedIn


@pytest.fixture
def fake_search():
    return FakeSearch
