"""
Unit tests for GP discovery and GP LinkedIn enrichment.
"""
import pytest

from vc_dossier.agents import GPDiscoveryService, GPEnrichmentAgent
from vc_dossier.agents.gp_discovery import extract_name_from_fact, filter_gp_names
from vc_dossier.schemas import LinkedInProfile, PageAnalysis, PageFact


@pytest.mark.parametrize("fact,name", [
    ("Jane Doe is the Managing Partner of Acme", "Jane Doe"),
    ("Ravi Kumar Sharma leads the fund", "Ravi Kumar Sharma"),
    ("the team has twelve members", None),
])
def test_extract_name_from_fact(fact, name):
    assert extract_name_from_fact(fact) == name


def test_filter_gp_names():
    assert filter_gp_names(["Jane Doe", "", None, "JD", "  John Roe "]) == ["Jane Doe", "John Roe"]


def test_discover_merges_sources_in_order(firm_record):
    analyses = [
        PageAnalysis(url="https://acme.vc/team", facts=[
            PageFact(category="team_member", fact="John Roe is a General Partner"),
            PageFact(category="team_member", fact="Jane Doe founded the firm"),
            PageFact(category="portfolio_company", fact="Zeta Labs raised Series A"),
        ]),
    ]
    profiles = [
        LinkedInProfile(name="Asha Iyer", headline="Partner at Acme Ventures"),
        LinkedInProfile(name="Sam Lee", headline="Software Engineer at Zeta"),
    ]

    names = GPDiscoveryService().discover(analyses, profiles, firm_record)

    assert names == ["Jane Doe", "John Roe", "Asha Iyer"]


@pytest.mark.asyncio
async def test_enrichment_finds_and_scrapes_profiles(fake_llm, fake_search, fake_linkedin):
    def pick(prompt):
        if "Jane Doe" in prompt:
            return {"linkedin_url": "https://www.linkedin.com/in/jane-doe", "confidence": 90}
        if "John Roe" in prompt:
            return {"linkedin_url": "https://www.linkedin.com/company/acme", "confidence": 40}
        return {"linkedin_url": "NOT_FOUND", "confidence": 0}

    llm = fake_llm(structured={"gp_linkedin_url": pick})
    search = fake_search(results={
        "Jane Doe": [{"title": "Jane Doe | LinkedIn", "link": "https://www.linkedin.com/in/jane-doe", "snippet": ""}],
        "John Roe": [{"title": "Acme | LinkedIn", "link": "https://www.linkedin.com/company/acme", "snippet": ""}],
    })
    linkedin = fake_linkedin(profiles=[{"url": "https://www.linkedin.com/in/jane-doe", "name": "Jane Doe"}])
    agent = GPEnrichmentAgent(llm, search, linkedin, query_delay=0, gp_delay=0)

    profiles = await agent.execute(["Jane Doe (Managing Partner)", "John Roe", "Nobody Known"], "Acme Ventures")

    assert [p.name for p in profiles] == ["Jane Doe"]
    assert linkedin.profile_calls == [["https://www.linkedin.com/in/jane-doe"]]
    assert search.queries[0] == "Jane Doe Acme Ventures LinkedIn"
    # "Nobody Known" has no search results, so the model is not asked
    assert len(llm.structured_calls) == 2


@pytest.mark.asyncio
async def test_enrichment_without_urls_skips_scraping(fake_llm, fake_search, fake_linkedin):
    linkedin = fake_linkedin()
    agent = GPEnrichmentAgent(fake_llm(), fake_search(), linkedin, query_delay=0, gp_delay=0)

    assert await agent.execute(["Jane Doe"], "Acme") == []
    assert await agent.execute([], "Acme") == []
    assert linkedin.profile_calls == []
