"""
Bright Data LinkedIn Scraper

Collects LinkedIn profiles and company pages through the Bright Data
dataset API: trigger a snapshot, poll its progress, download the records.
"""

import json
import asyncio
from typing import Dict, Any, List, Optional

import aiohttp

from .base import LinkedInScraper
from ...schemas import ScrapeOutcome
from ...utils.config import settings
from ...utils.logger import linkedin_logger as logger

API_BASE = "https://api.brightdata.com/datasets/v3"
MAX_ATTEMPTS = 3


class BrightDataError(Exception):
    """A snapshot could not be triggered, completed or downloaded."""


class BrightDataLinkedInScraper(LinkedInScraper):
    """LinkedIn provider backed by Bright Data datasets"""

    provider = "brightdata"

    def __init__(
        self,
        api_key: Optional[str] = None,
        profile_dataset_id: Optional[str] = None,
        company_dataset_id: Optional[str] = None,
        poll_interval: Optional[int] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = settings.BRIGHT_DATA_API_KEY if api_key is None else api_key
        self.profile_dataset_id = profile_dataset_id or settings.BRIGHT_DATA_PROFILE_DATASET_ID
        self.company_dataset_id = company_dataset_id or settings.BRIGHT_DATA_COMPANY_DATASET_ID
        self.poll_interval = settings.BRIGHT_DATA_POLL_INTERVAL if poll_interval is None else poll_interval
        self.timeout = settings.BRIGHT_DATA_TIMEOUT if timeout is None else timeout
        self.backoff_base = 1.0

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def scrape_profiles(self, urls: List[str]) -> ScrapeOutcome:
        logger.info(f"Scraping {len(urls)} LinkedIn profile(s) via Bright Data...")
        return await self._scrape_with_retries(urls, self.profile_dataset_id, "profile")

    async def scrape_companies(self, urls: List[str]) -> ScrapeOutcome:
        logger.info(f"Scraping {len(urls)} LinkedIn company page(s) via Bright Data...")
        return await self._scrape_with_retries(urls, self.company_dataset_id, "company")

    async def _scrape_with_retries(self, urls: List[str], dataset_id: str, kind: str) -> ScrapeOutcome:
        if not urls:
            return ScrapeOutcome(success=False, message="No URLs to scrape")
        if not self.is_configured():
            return ScrapeOutcome(success=False, message="BRIGHT_DATA_API_KEY is not set")

        for attempt in range(1, MAX_ATTEMPTS + 1):
            if attempt > 1:
                backoff = self.backoff_base * 2 ** (attempt - 1)
                logger.info(f"Retry attempt {attempt}/{MAX_ATTEMPTS} (waiting {backoff:.0f}s)...")
                await asyncio.sleep(backoff)

            try:
                items = await self._collect(urls, dataset_id)
            except (BrightDataError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.error(f"Bright Data {kind} attempt {attempt} failed: {str(e)}")
                if attempt == MAX_ATTEMPTS:
                    return ScrapeOutcome(
                        success=False,
                        message=f"Bright Data {kind} scraping failed after {MAX_ATTEMPTS} attempts: {str(e)}",
                    )
                continue

            items = [item for item in items if isinstance(item, dict) and not item.get("error")]
            if not items:
                logger.warning(f"No {kind} records returned from Bright Data")
                return ScrapeOutcome(success=False, message="No data returned from Bright Data")

            logger.info(f"Retrieved {len(items)} {kind} record(s)")
            return ScrapeOutcome(success=True, items=items)

        return ScrapeOutcome(success=False, message="Bright Data scraping failed")

    async def _collect(self, urls: List[str], dataset_id: str) -> List[Dict[str, Any]]:
        async with aiohttp.ClientSession(headers=self.headers) as session:
            snapshot_id = await self._trigger(session, urls, dataset_id)
            await self._wait_ready(session, snapshot_id)
            return await self._download(session, snapshot_id)

    async def _trigger(self, session: aiohttp.ClientSession, urls: List[str], dataset_id: str) -> str:
        trigger_url = f"{API_BASE}/trigger"
        params = {"dataset_id": dataset_id, "include_errors": "true"}
        payload = [{"url": url} for url in urls]

        async with session.post(trigger_url, params=params, json=payload, timeout=aiohttp.ClientTimeout(total=30)) as response:
            if response.status != 200:
                raise BrightDataError(f"Trigger failed: HTTP {response.status} {await response.text()}")
            data = await response.json(content_type=None)

        if not isinstance(data, dict):
            raise BrightDataError(f"Unexpected trigger response: {data}")
        snapshot_id = data.get("snapshot_id") or data.get("snapshot") or data.get("id")
        if not snapshot_id:
            raise BrightDataError(f"Trigger response had no snapshot id: {data}")
        logger.info(f"Bright Data snapshot triggered: {snapshot_id}")
        return snapshot_id

    async def _wait_ready(self, session: aiohttp.ClientSession, snapshot_id: str) -> None:
        elapsed = 0
        while elapsed <= self.timeout:
            async with session.get(f"{API_BASE}/progress/{snapshot_id}", timeout=aiohttp.ClientTimeout(total=15)) as response:
                if response.status == 200:
                    data = await response.json(content_type=None)
                    if not isinstance(data, dict):
                        raise BrightDataError(f"Unexpected progress response: {data}")
                    status = (data.get("status") or data.get("state") or "").lower()
                    logger.debug(f"Snapshot {snapshot_id} at {elapsed}s: status={status}")
                    if status == "ready":
                        return
                    if status in ("error", "failed"):
                        raise BrightDataError(f"Snapshot {snapshot_id} failed: {data}")
                else:
                    logger.warning(f"Progress check returned HTTP {response.status}")
            await asyncio.sleep(self.poll_interval)
            elapsed += self.poll_interval
        raise BrightDataError(f"Snapshot {snapshot_id} not ready after {self.timeout}s")

    async def _download(self, session: aiohttp.ClientSession, snapshot_id: str) -> List[Dict[str, Any]]:
        url = f"{API_BASE}/snapshot/{snapshot_id}"
        async with session.get(url, params={"format": "json"}, timeout=aiohttp.ClientTimeout(total=120)) as response:
            if response.status != 200:
                raise BrightDataError(f"Snapshot download failed: HTTP {response.status}")
            text = await response.text()

        return parse_snapshot(text)


def parse_snapshot(text: str) -> List[Dict[str, Any]]:
    """Snapshots arrive as a JSON array, a single object or JSON lines"""
    text = (text or "").strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        records = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning("Skipping malformed snapshot line")
        return records
    return data if isinstance(data, list) else [data]
