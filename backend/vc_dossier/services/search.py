"""
Search Service Module

Web search through SERP API, used for GP LinkedIn lookups and homepage
discovery.

Key Features:
- Organic result retrieval
- Homepage lookup that skips regulator pages
- Email-domain fallback
"""

import asyncio
from typing import Dict, List, Optional, Any

from serpapi import GoogleSearch
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..utils.config import settings
from ..utils.logger import search_logger as logger
from ..utils.url_utils import is_excluded_domain


class SearchService:
    """
    Service for programmable web search.
    Failures are logged and surface as empty result lists.
    """

    def __init__(self, api_key: Optional[str] = None, country: Optional[str] = None):
        self.api_key = settings.SERPAPI_KEY if api_key is None else api_key
        self.country = country or settings.SEARCH_COUNTRY
        if not self.api_key:
            logger.warning("SERP API not configured; searches will return no results")
        logger.info("SearchService initialized")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(Exception),
        reraise=True,
    )
    async def _fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(lambda: GoogleSearch(params).get_dict())

    async def search(self, query: str, num: int = 5) -> List[Dict[str, str]]:
        """
        Execute a search query

        Args:
            query: The search query
            num: Maximum number of organic results

        Returns:
            List of {title, link, snippet}
        """
        if not self.is_configured:
            return []

        params = {
            "q": query,
            "api_key": self.api_key,
            "engine": "google",
            "num": num,
            "gl": self.country,
        }

        try:
            results = await self._fetch(params)
        except Exception as e:
            logger.error(f"SERP search failed for '{query}': {str(e)}")
            return []

        if results.get("error"):
            logger.warning(f"SERP API returned an error for '{query}': {results['error']}")
            return []

        organic = results.get("organic_results", [])[:num]
        logger.info(f"SERP search for '{query}' returned {len(organic)} organic results")
        return [
            {
                "title": item.get("title", ""),
                "link": item.get("link", ""),
                "snippet": item.get("snippet", ""),
            }
            for item in organic
        ]

    async def find_homepage(
        self,
        name: str,
        registration_no: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[Dict[str, str]]:
        """
        Locate a firm's own website.

        Tries increasingly generic queries, never accepting SEBI or government
        pages, and falls back to the domain of the contact email.
        """
        domain = email.split("@")[1] if email and "@" in email else None
        queries = [
            f'"{name}" official site',
            f'"{name}" fund website',
            f'"{name}" portfolio',
            f'"{name}" venture capital',
            f'"{name}" AIF',
            f'"{name}" private equity',
            f"{name} {registration_no}" if registration_no else None,
            domain,
        ]

        for query in filter(None, queries):
            results = await self.search(query, 5)
            if not results:
                logger.debug(f"No results for query: {query}")
                continue

            for result in results:
                link = result.get("link") or ""
                if not link.startswith(("http://", "https://")):
                    continue
                if is_excluded_domain(link, result.get("title", "")):
                    continue
                logger.info(f"Using homepage {link} for {name}")
                return result

            logger.debug(f"All results for '{query}' were SEBI or .gov.in links")

        if domain:
            logger.info(f"Falling back to email domain for {name}: https://{domain}")
            return {"link": f"https://{domain}", "title": domain, "snippet": ""}

        logger.warning(f"No homepage found for {name}")
        return None
