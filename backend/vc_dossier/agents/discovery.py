"""
Discovery Agent Module

Finds the URLs worth scraping for a firm: its own website pages, LinkedIn
pages, investor-database profiles and news coverage.
"""

import asyncio
from typing import Dict, Any, List

from ..schemas import FirmRecord, DiscoveryResult, DiscoveredURL
from ..services.llm import LLMService
from ..utils.logger import agents_logger as logger
from ..utils.url_utils import sanitize_text, to_score

CONTEXT_LIMIT = 40000
SEARCH_SEPARATOR = "\n\n=== NEXT SEARCH RESULT ===\n\n"

URL_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "urls": {
            "type": "array",
            "description": "Discovered URLs with what each one contains and how useful it is.",
            "items": {
                "type": "object",
                "properties": {
                    "url": {"type": "string", "description": "The discovered URL"},
                    "context": {"type": "string", "description": "What this URL contains"},
                    "importance": {
                        "type": "integer",
                        "minimum": 1,
                        "maximum": 100,
                        "description": "Relevance score (1-100)",
                    },
                },
                "required": ["url", "context", "importance"],
            },
        }
    },
    "required": ["urls"],
}


def _describe_firm(record: FirmRecord) -> str:
    return (
        f'"{record.name}" (Contact: {record.contact_person or "unknown"}, '
        f'SEBI Reg: {record.registration_no or "unknown"})'
    )


class DiscoveryAgent:
    """
    Agent for URL discovery.
    Runs grounded searches, then has the model structure every URL it saw.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    def build_queries(self, record: FirmRecord) -> List[str]:
        contact = record.contact_person or "unknown"
        return [
            f'Official website for Indian VC firm "{record.name}" '
            f"(Contact: {contact}, SEBI Registration: {record.registration_no or 'unknown'})",
            f'LinkedIn page for Indian VC firm "{record.name}" (Contact: {contact})',
            f'Pitchbook profile for Indian VC firm "{record.name}" (Contact: {contact})',
        ]

    async def execute(self, record: FirmRecord) -> DiscoveryResult:
        logger.info(f"Discovery: starting for {record.name}")

        queries = self.build_queries(record)
        results = await asyncio.gather(*(self.llm.generate_content(q) for q in queries))
        context = sanitize_text(SEARCH_SEPARATOR.join(results))
        logger.info(f"Discovery: search context length {len(context)}")

        additional = await self.llm.generate_content(self._additional_search_prompt(record))
        full_context = f"{context}\n\n=== ADDITIONAL SEARCH ===\n\n{additional}"

        data = await self.llm.generate_structured(
            self._extraction_prompt(record, full_context),
            URL_SCHEMA,
            name="discovered_urls",
        )

        urls = []
        for item in data.get("urls") or []:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            urls.append(DiscoveredURL(
                url=item["url"].strip(),
                context=item.get("context") or "",
                importance=to_score(item.get("importance")),
                source="discovery",
            ))

        logger.info(f"Discovery: found {len(urls)} URLs for {record.name}")
        return DiscoveryResult(urls=urls)

    def _additional_search_prompt(self, record: FirmRecord) -> str:
        return f"""
Find every relevant URL for the Indian VC firm {_describe_firm(record)}.

Look for:
- The official website and its team, portfolio, funds, strategy, about and contact pages
- The LinkedIn company page
- PitchBook and Tracxn profiles
- News about fund announcements, deals and exits
- Database listings

List each URL with a short description.
"""

    def _extraction_prompt(self, record: FirmRecord, context: str) -> str:
        return f"""
You are a VC data analyst collecting URLs for the Indian VC firm {_describe_firm(record)}.

We are building a complete profile of this fund and need URLs covering:
- Fund details (names, sizes, vintage years, closings)
- Team (GPs, partners, their backgrounds)
- Portfolio companies and exits
- Recent (2020 onwards) and older deals
- Investment strategy, sector focus and cheque size
- Contact and office details

SEARCH CONTEXT:
{context[:CONTEXT_LIMIT]}

INSTRUCTIONS:
1. Include every relevant URL from the context, and infer likely pages of the official
   site (/team, /portfolio, /funds, /about) once its domain is known.
2. Prefer clean direct URLs over redirect links. For news, give the article URL.
3. For each URL say what data it holds, e.g. "Fund III $350M closing announcement".
4. Score importance 1-100:
   official website and its pages 90-100, fund announcements and deals 85-98,
   LinkedIn company page 80-90, PitchBook/Tracxn 70-85, partner interviews 70-80,
   historical deals 60-75, general news 50-70, irrelevant 0-10.
5. Aim for 10-15 high-quality URLs.
"""
