"""
SEBI Registry Scraper Module

Reads the SEBI list of registered Alternative Investment Funds, the input
of the dossier pipeline.
"""

import os
import json
from typing import List, Dict, Optional

from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from ..schemas import FirmRecord
from ..utils.config import settings
from ..utils.logger import browser_logger as logger

REGISTRY_URL = "https://www.sebi.gov.in/sebiweb/other/OtherAction.do?doRecognisedFpi=yes&intmId=16"
CARD_CONTAINER = ".fixed-table-body.card-table .card-table-left"
NEXT_BUTTON = 'li a[title="Next"]'


def parse_registry_cards(html: str) -> List[Dict[str, str]]:
    """
    Turn the card-view listing into registry rows.

    Each card is a run of title/value pairs starting at "Name". A value
    without a title continues the previous field.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    records: List[Dict[str, str]] = []

    for container in soup.select(".card-table-left"):
        card: Dict[str, str] = {}
        last_label = ""
        for view in container.select(".card-view"):
            title_el = view.select_one(".title span")
            value_el = view.select_one(".value span, .value .varun-text")
            title = title_el.get_text(strip=True) if title_el else ""
            value = value_el.get_text(strip=True) if value_el else ""

            if title and title.lower() == "name":
                if card:
                    records.append(card)
                card = {"Name": value}
                last_label = "Name"
            elif title:
                card[title] = value
                last_label = title
            elif value and last_label:
                card[last_label] = f"{card[last_label]} {value}".strip()
        if card:
            records.append(card)

    return records


class SebiRegistryScraper:
    """Pages through the SEBI AIF registry in a headless browser"""

    def __init__(self, headless: Optional[bool] = None):
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless

    async def scrape(self, max_pages: int = -1, delay: float = 1.5) -> List[FirmRecord]:
        """
        Scrape registry records.

        Args:
            max_pages: Maximum number of listing pages, -1 for all
            delay: Seconds to wait for each AJAX page load
        """
        rows: List[Dict[str, str]] = []
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless)
            try:
                page = await browser.new_page()
                await page.goto(REGISTRY_URL, wait_until="domcontentloaded", timeout=35000)
                await page.click("text=Show All Records")
                await page.wait_for_selector(CARD_CONTAINER, timeout=20000)

                current_page = 1
                while True:
                    logger.info(f"Scraping SEBI page {current_page} ...")
                    html = await page.inner_html(".fixed-table-body.card-table")
                    rows.extend(parse_registry_cards(f"<div>{html}</div>"))

                    next_button = await page.query_selector(NEXT_BUTTON)
                    if not next_button or (max_pages > 0 and current_page >= max_pages):
                        break
                    await next_button.click()
                    await page.wait_for_timeout(int(delay * 1000))
                    current_page += 1
            finally:
                await browser.close()

        records = []
        for row in rows:
            if not row.get("Name"):
                continue
            records.append(FirmRecord.model_validate(row))
        logger.info(f"Scraped {len(records)} SEBI records")
        return records

    @staticmethod
    def save_records(records: List[FirmRecord], path: str) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump([r.to_registry_dict() for r in records], f, indent=2, ensure_ascii=False)
        logger.info(f"Saved {len(records)} SEBI records to {path}")
        return path
