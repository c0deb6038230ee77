"""
Unit tests for the storage service.
"""
import os
import json
import pytest


@pytest.mark.parametrize("name,slug", [
    ("Acme Ventures Fund", "acme-ventures-fund"),
    ("  3one4 Capital Fund - II ", "3one4-capital-fund-ii"),
    ("A&B Partners (India) LLP.", "a-b-partners-india-llp"),
])
def test_firm_slug(storage, name, slug):
    """Slugs are lowercase with dashes and no leading or trailing dash."""
    assert storage.get_firm_slug(name) == slug


def test_save_page_writes_all_artefacts(storage):
    """Raw HTML, cleaned HTML, plain text and links are written per page."""
    cleaned = {
        "cleaned_html": "<h1>Team</h1>",
        "plain_text": "Team",
        "links": [{"url": "https://www.linkedin.com/in/jane-doe", "text": "Jane"}],
    }
    storage.save_page("acme", "page_001", "<html><h1>Team</h1></html>", cleaned)

    firm_dir = storage.get_firm_dir("acme")
    assert os.path.exists(os.path.join(firm_dir, "raw_pages", "page_001.html"))
    assert os.path.exists(os.path.join(firm_dir, "cleaned_pages", "page_001.html"))
    with open(os.path.join(firm_dir, "plain_text", "page_001.txt"), encoding="utf-8") as f:
        assert f.read() == "Team"

    assert storage.firm_exists("acme")
    assert storage.load_extracted_links("acme") == cleaned["links"]


def test_load_extracted_links_concatenates_pages(storage):
    """Links from every page come back in page order."""
    storage.save_page("acme", "page_002", "<html/>", {"links": [{"url": "https://b.com", "text": ""}]})
    storage.save_page("acme", "page_001", "<html/>", {"links": [{"url": "https://a.com", "text": ""}]})

    links = storage.load_extracted_links("acme")
    assert [l["url"] for l in links] == ["https://a.com", "https://b.com"]


def test_json_round_trip_and_missing_files(storage):
    """Missing or corrupt artefacts load as None."""
    storage.save_json("acme", "final_report.json", {"firm_name": "Acme"})
    assert storage.load_json("acme", "final_report.json") == {"firm_name": "Acme"}
    assert storage.load_json("acme", "news.json") is None

    with open(os.path.join(storage.get_firm_dir("acme"), "broken.json"), "w") as f:
        f.write("{not json")
    assert storage.load_json("acme", "broken.json") is None


def test_page_analyses_and_queue(storage):
    """Page analyses are loaded sorted by page id; the LinkedIn queue is saved as JSON."""
    storage.save_page_analysis("acme", "page_002", {"url": "https://acme.vc/team"})
    storage.save_page_analysis("acme", "page_001", {"url": "https://acme.vc"})
    assert [a["url"] for a in storage.load_page_analyses("acme")] == ["https://acme.vc", "https://acme.vc/team"]

    path = storage.save_linkedin_queue("acme", [{"url": "https://www.linkedin.com/company/acme"}])
    with open(path, encoding="utf-8") as f:
        assert json.load(f)[0]["url"].endswith("/company/acme")


def test_list_firm_slugs_and_batch_results(storage):
    """Firm directories are listed sorted; batch results land in the data dir."""
    storage.save_json("beta", "news.json", {})
    storage.save_json("alpha", "news.json", {})
    assert storage.list_firm_slugs() == ["alpha", "beta"]

    path = storage.save_batch_results([{"success": True}])
    assert path == os.path.join(storage.base_dir, "batch_results.json")
    assert os.path.exists(path)
