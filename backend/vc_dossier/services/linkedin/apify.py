"""
Apify LinkedIn Scraper

Runs an Apify LinkedIn actor synchronously and reads back its dataset
items through the Apify REST API.
"""

import asyncio
from typing import Dict, Any, List, Optional

import aiohttp

from .base import LinkedInScraper
from ...schemas import ScrapeOutcome
from ...utils.config import settings
from ...utils.logger import linkedin_logger as logger

API_BASE = "https://api.apify.com/v2"


class ApifyLinkedInScraper(LinkedInScraper):
    """LinkedIn provider backed by an Apify actor"""

    provider = "apify"

    def __init__(self, api_token: Optional[str] = None, actor_id: Optional[str] = None, timeout: int = 900):
        self.api_token = settings.APIFY_API_TOKEN if api_token is None else api_token
        self.actor_id = actor_id or settings.APIFY_ACTOR_ID
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_token)

    @property
    def run_url(self) -> str:
        # Actor ids use "~" in place of "/" in API paths
        actor_path = self.actor_id.replace("/", "~")
        return f"{API_BASE}/acts/{actor_path}/run-sync-get-dataset-items"

    def build_input(self, urls: List[str], scrape_company: bool = False) -> Dict[str, Any]:
        return {
            "urls": [{"url": url} for url in urls],
            "findContacts.contactCompassToken": "",
            "scrapeCompany": scrape_company,
        }

    async def scrape_profiles(self, urls: List[str]) -> ScrapeOutcome:
        logger.info(f"Scraping {len(urls)} LinkedIn profile(s) via Apify...")
        return await self._run(self.build_input(urls), "profile")

    async def scrape_companies(self, urls: List[str]) -> ScrapeOutcome:
        logger.info(f"Scraping {len(urls)} LinkedIn company page(s) via Apify...")
        return await self._run(self.build_input(urls, scrape_company=True), "company")

    async def _run(self, actor_input: Dict[str, Any], kind: str) -> ScrapeOutcome:
        if not actor_input["urls"]:
            return ScrapeOutcome(success=False, message="No URLs to scrape")
        if not self.is_configured():
            return ScrapeOutcome(success=False, message="APIFY_API_TOKEN is not set")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.run_url,
                    params={"token": self.api_token},
                    json=actor_input,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status not in (200, 201):
                        body = await response.text()
                        return ScrapeOutcome(
                            success=False,
                            message=f"Apify actor run failed: HTTP {response.status} {body[:200]}",
                        )
                    items = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Apify {kind} scraping failed: {str(e)}")
            return ScrapeOutcome(success=False, message=f"Apify LinkedIn scraping failed: {str(e)}")

        if not isinstance(items, list) or not items:
            logger.warning("No items found in Apify dataset")
            return ScrapeOutcome(success=False, message="No data returned from Apify")

        logger.info(f"Retrieved {len(items)} {kind} record(s) from Apify")
        return ScrapeOutcome(success=True, items=items)
