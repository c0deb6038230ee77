"""
Unit tests for the per-firm pipeline, with every external service faked.
"""
import os

import pytest

from vc_dossier.pipeline import VCScraperPipeline
from vc_dossier.schemas import FirmRecord, PageAnalysis, ScrapeResult

JANE = "https://www.linkedin.com/in/jane-doe"
JOHN = "https://www.linkedin.com/in/john-roe"
INTERN = "https://www.linkedin.com/in/summer-intern"
COMPANY = "https://www.linkedin.com/company/acme-ventures"

TEAM_HTML = f"""
<html><head><title>Team</title></head><body>
<h1>Our Team</h1>
<p>John Roe is a General Partner.</p>
<a href="{JANE}">Jane Doe</a>
<a href="{INTERN}">Intern</a>
<a href="/portfolio">Portfolio</a>
</body></html>
"""

SCORES = {JANE: 95, COMPANY: 90, JOHN: 85, INTERN: 30}

REPORT = {
    "firm_name": "Acme Ventures Fund",
    "fund_names": ["Acme Fund I"],
    "gps": [{"name": "Jane Doe, Managing Partner", "background": "Ex-Matrix Partners."}],
    "portfolio_companies": ["Zeta"],
}


class FakeBrowser:
    def __init__(self, pages):
        self.pages = pages
        self.visited = []
        self.closed = 0

    async def scrape(self, url):
        self.visited.append(url)
        if url not in self.pages:
            return ScrapeResult(url=url, html=None, status_code=0, error="Timeout 60000ms exceeded")
        return ScrapeResult(url=url, html=self.pages[url], status_code=200)

    async def close(self):
        self.closed += 1


def _score_links(prompt):
    links = []
    for line in prompt.splitlines():
        line = line.strip()
        if ". https://" in line:
            url = line.split(". ", 1)[1]
            links.append({"url": url, "importance": SCORES.get(url, 10), "category": "linkedin_gp", "reasoning": ""})
    return {"prioritized_links": links}


def _discovered(prompt):
    if "Broken Fund" in prompt:
        raise RuntimeError("Resource exhausted")
    return {"urls": [
        {"url": "https://acme.vc/team", "context": "Team page", "importance": 95},
        {"url": "https://acme.vc/fund-ii", "context": "Fund II", "importance": 90},
        {"url": COMPANY, "context": "LinkedIn company page", "importance": 85},
    ]}


def _llm(fake_llm):
    return fake_llm(structured={
        "discovered_urls": _discovered,
        "news_insights": {"fund_details": ["Fund I: $50M"]},
        "page_analysis": {
            "is_relevant": True,
            "page_summary": "Team page",
            "facts": [{"category": "team_member", "fact": "John Roe is a General Partner", "confidence": 90}],
        },
        "prioritized_links": _score_links,
        "gp_linkedin_url": {"linkedin_url": JOHN, "confidence": 90},
        "firm_report": REPORT,
    })


@pytest.fixture
def linkedin(fake_linkedin):
    return fake_linkedin(
        profiles=[
            {"url": JANE, "name": "Jane Doe", "headline": "Managing Partner at Acme Ventures"},
            {"url": JOHN, "name": "John Roe", "headline": "General Partner"},
        ],
        companies=[{"url": COMPANY, "name": "Acme Ventures", "founded": 2015}],
    )


def _pipeline(storage, llm, linkedin, search, browser):
    pipeline = VCScraperPipeline(
        storage=storage,
        llm=llm,
        search=search,
        browser=browser,
        linkedin=linkedin,
        page_delay=0,
        firm_delay=0,
        min_importance=60,
        enhance_gp_backgrounds=True,
    )
    pipeline.prioritizer.batch_delay = 0
    pipeline.gp_enrichment.query_delay = 0
    pipeline.gp_enrichment.gp_delay = 0
    return pipeline


@pytest.mark.asyncio
async def test_process_firm_runs_every_phase(storage, firm_record, fake_llm, fake_search, linkedin):
    llm = _llm(fake_llm)
    search = fake_search(results={"John Roe": [{"title": "John Roe | LinkedIn", "link": JOHN, "snippet": ""}]})
    browser = FakeBrowser({"https://acme.vc/team": TEAM_HTML})
    pipeline = _pipeline(storage, llm, linkedin, search, browser)

    result = await pipeline.process_firm(firm_record)

    assert result.success is True, result.error
    assert result.firm_slug == "acme-ventures-fund"
    assert result.report.fund_names == ["Acme Fund I"]
    assert browser.visited == ["https://acme.vc/team", "https://acme.vc/fund-ii"]
    assert browser.closed == 1

    slug = result.firm_slug
    firm_dir = storage.get_firm_dir(slug)
    for artefact in [
        "discovery.json",
        "news.json",
        "linkedin_queue.json",
        "raw_pages/page_001.html",
        "plain_text/page_001.txt",
        "extracted_links/page_001.json",
        "page_analyses/page_001.json",
        "final_report.json",
    ]:
        assert os.path.exists(os.path.join(firm_dir, artefact)), artefact
    # the failed page leaves no artefacts
    assert not os.path.exists(os.path.join(firm_dir, "raw_pages", "page_002.html"))

    prioritized = storage.load_json(slug, "linkedin_prioritized.json")
    assert [p["url"] for p in prioritized] == [JANE, COMPANY]

    assert linkedin.profile_calls[0] == [JANE]
    assert linkedin.company_calls == [[COMPANY]]
    assert storage.load_json(slug, "linkedin_scraped_profiles.json")[0]["name"] == "Jane Doe"
    assert storage.load_json(slug, "linkedin_scraped_companies.json")[0]["founded"] == 2015

    # Jane already has a profile, so only John is looked up
    assert linkedin.profile_calls[1] == [JOHN]
    assert [p["name"] for p in storage.load_json(slug, "linkedin_gp_profiles.json")] == ["John Roe"]

    assert result.stats["scraped_pages"] == 1
    assert result.stats["linkedin_urls"] == 3
    assert result.stats["gp_profiles"] == 1
    assert "duration_minutes" in result.stats

    synthesis_prompt = llm.content_calls[-1]["prompt"]
    assert "John Roe is a General Partner" in synthesis_prompt
    assert "Fund I: $50M" in synthesis_prompt
    # synthesis plus GP background enhancement
    assert [c["name"] for c in llm.structured_calls].count("firm_report") == 2


@pytest.mark.asyncio
async def test_process_firm_reports_failure(storage, fake_llm, fake_search, linkedin):
    record = FirmRecord(name="Broken Fund")
    pipeline = _pipeline(storage, _llm(fake_llm), linkedin, fake_search(), FakeBrowser({}))

    result = await pipeline.process_firm(record)

    assert result.success is False
    assert "Resource exhausted" in result.error
    assert result.report is None


@pytest.mark.asyncio
async def test_linkedin_phase_skipped_when_provider_unconfigured(storage, firm_record, fake_llm, fake_search, fake_linkedin):
    linkedin = fake_linkedin(configured=False)
    browser = FakeBrowser({"https://acme.vc/team": TEAM_HTML})
    pipeline = _pipeline(storage, _llm(fake_llm), linkedin, fake_search(), browser)

    result = await pipeline.process_firm(firm_record)

    assert result.success is True
    assert linkedin.profile_calls == []
    assert linkedin.company_calls == []
    assert result.stats["linkedin_profiles"] == 0
    assert storage.load_json(result.firm_slug, "linkedin_gp_profiles.json") is None


@pytest.mark.asyncio
async def test_homepage_fallback_when_only_linkedin_found(storage, firm_record, fake_llm, fake_search, linkedin):
    llm = _llm(fake_llm)
    llm.structured["discovered_urls"] = {"urls": [{"url": COMPANY, "context": "LinkedIn", "importance": 80}]}
    search = fake_search(results={"homepage": {"link": "https://acme.vc/team", "title": "Acme Ventures"}})
    browser = FakeBrowser({"https://acme.vc/team": TEAM_HTML})
    pipeline = _pipeline(storage, llm, linkedin, search, browser)

    result = await pipeline.process_firm(firm_record)

    assert result.success is True
    assert browser.visited == ["https://acme.vc/team"]
    assert result.stats["regular_urls"] == 1


@pytest.mark.asyncio
async def test_process_batch_continues_after_failure(storage, firm_record, fake_llm, fake_search, linkedin):
    browser = FakeBrowser({"https://acme.vc/team": TEAM_HTML})
    pipeline = _pipeline(storage, _llm(fake_llm), linkedin, fake_search(), browser)

    results = await pipeline.process_batch([FirmRecord(name="Broken Fund"), firm_record])

    assert [r.success for r in results] == [False, True]
    assert os.path.exists(os.path.join(storage.base_dir, "batch_results.json"))
    assert browser.closed >= 2


@pytest.mark.asyncio
async def test_resume_reuses_persisted_artefacts(storage, firm_record, fake_llm, fake_search, linkedin):
    slug = storage.get_firm_slug(firm_record.name)
    storage.save_page_analysis(slug, "page_001", PageAnalysis(
        url="https://acme.vc/team", page_type="team", is_relevant=True,
        facts=[{"category": "team_member", "fact": "John Roe is a General Partner", "confidence": 90}],
    ).model_dump())
    storage.save_json(slug, "linkedin_prioritized.json", [
        {"url": JANE, "importance": 95, "category": "linkedin_gp"},
        {"url": COMPANY, "importance": 90, "category": "firm_official"},
    ])
    storage.save_json(slug, "linkedin_scraped_profiles.json", [{"url": JANE, "name": "Jane Doe", "headline": "Partner"}])
    storage.save_json(slug, "linkedin_gp_profiles.json", [{"url": JOHN, "name": "John Roe"}])

    llm = _llm(fake_llm)
    browser = FakeBrowser({})
    pipeline = _pipeline(storage, llm, linkedin, fake_search(), browser)

    result = await pipeline.resume_firm(firm_record)

    assert result.success is True, result.error
    assert browser.visited == []
    assert linkedin.profile_calls == []
    assert linkedin.company_calls == [[COMPANY]]
    assert result.stats["linkedin_profiles"] == 1
    assert result.stats["gp_profiles"] == 1
    assert storage.load_json(slug, "final_report.json")["firm_name"] == "Acme Ventures Fund"
    assert not any(c["name"] == "discovered_urls" for c in llm.structured_calls)


@pytest.mark.asyncio
async def test_resume_without_data_fails(storage, firm_record, fake_llm, fake_search, linkedin):
    pipeline = _pipeline(storage, _llm(fake_llm), linkedin, fake_search(), FakeBrowser({}))

    result = await pipeline.resume_firm(firm_record)

    assert result.success is False
    assert "Data directory not found" in result.error
