"""
GP Enrichment Agent Module

Finds each General Partner's LinkedIn profile through web search and
scrapes the profiles through the configured LinkedIn provider.
"""

import asyncio
from typing import Dict, Any, List, Optional

from ..schemas import LinkedInProfile
from ..services.llm import LLMService
from ..services.search import SearchService
from ..services.linkedin import LinkedInScraper
from ..utils.config import settings
from ..utils.logger import agents_logger as logger
from ..utils.url_utils import clean_person_name, is_linkedin_company

NOT_FOUND = "NOT_FOUND"

PICK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "linkedin_url": {
            "type": "string",
            "description": "The complete LinkedIn profile URL or 'NOT_FOUND'",
        },
        "confidence": {"type": "integer", "description": "Confidence score (0-100)"},
        "reasoning": {
            "type": "string",
            "description": "Which result contained the URL and why it was chosen",
        },
    },
    "required": ["linkedin_url", "confidence"],
}


class GPEnrichmentAgent:
    """Agent for targeted GP LinkedIn lookups"""

    def __init__(
        self,
        llm: LLMService,
        search: SearchService,
        linkedin: LinkedInScraper,
        query_delay: Optional[float] = None,
        gp_delay: Optional[float] = None,
    ):
        self.llm = llm
        self.search = search
        self.linkedin = linkedin
        self.query_delay = settings.GP_QUERY_DELAY if query_delay is None else query_delay
        self.gp_delay = settings.GP_SEARCH_DELAY if gp_delay is None else gp_delay

    def build_queries(self, gp_name: str, firm_name: str) -> List[str]:
        return [f"{gp_name} {firm_name} LinkedIn"]

    async def execute(self, gp_names: List[str], firm_name: str) -> List[LinkedInProfile]:
        if not gp_names:
            logger.warning("No GPs provided for enrichment")
            return []

        unique = list(dict.fromkeys(gp_names))
        logger.info(f"GP enrichment: targeting {len(unique)} GPs: {', '.join(unique)}")

        found_urls: List[str] = []
        for raw_name in unique:
            gp_name = clean_person_name(raw_name)
            url = await self.find_linkedin_url(gp_name, firm_name)
            if url and url not in found_urls:
                found_urls.append(url)
            await asyncio.sleep(self.gp_delay)

        profile_urls = [url for url in found_urls if not is_linkedin_company(url)]
        if not profile_urls:
            logger.warning("GP enrichment: no GP LinkedIn URLs found")
            return []

        logger.info(f"GP enrichment: scraping {len(profile_urls)} GP profiles")
        outcome = await self.linkedin.scrape_profiles(profile_urls)
        if not outcome.success:
            logger.warning(f"Failed to scrape GP profiles: {outcome.message}")
            return []

        profiles = self.linkedin.format_profiles(outcome.items)
        logger.info(f"GP enrichment: enriched {len(profiles)} GP profiles")
        return profiles

    async def find_linkedin_url(self, gp_name: str, firm_name: str) -> Optional[str]:
        """Search the web, then let the model pick the matching /in/ URL"""
        results: List[Dict[str, str]] = []
        for query in self.build_queries(gp_name, firm_name):
            logger.debug(f"GP search query: {query}")
            results.extend(await self.search.search(query, 5))
            await asyncio.sleep(self.query_delay)

        if not results:
            logger.info(f"No search results for {gp_name}")
            return None

        formatted = "\n\n".join(
            f"[{idx + 1}] {r.get('title', '')}\nURL: {r.get('link', '')}\nSnippet: {r.get('snippet', '')}"
            for idx, r in enumerate(results)
        )
        prompt = f"""
Extract the LinkedIn profile URL for "{gp_name}", General Partner at "{firm_name}".

SEARCH RESULTS:
{formatted}

INSTRUCTIONS:
1. Only consider URLs of the form https://www.linkedin.com/in/... or https://linkedin.com/in/...
2. Choose the one that best matches "{gp_name}" at "{firm_name}" using the title and snippet.
3. Return the URL exactly as it appears in the results.
4. If there is no matching profile URL, return "{NOT_FOUND}".
"""
        result = await self.llm.generate_structured(prompt, PICK_SCHEMA, name="gp_linkedin_url")
        url = (result.get("linkedin_url") or "").strip()
        logger.info(f"GP {gp_name}: {url or NOT_FOUND} (confidence {result.get('confidence')})")

        if url and url != NOT_FOUND and "linkedin.com/in/" in url:
            return url
        return None
