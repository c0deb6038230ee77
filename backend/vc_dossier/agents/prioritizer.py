"""
Link Prioritization Agent Module

Scores LinkedIn URLs by how much they are likely to reveal about a firm,
so that only the valuable ones are sent to the paid LinkedIn providers.

Key Features:
- Normalized de-duplication keeping the richest description
- Batched scoring with firm context from the SEBI record
- Importance-sorted output
"""

import asyncio
from typing import Dict, Any, List, Optional

from ..schemas import PrioritizedLink, LINK_CATEGORIES
from ..services.llm import LLMService
from ..utils.config import settings
from ..utils.logger import agents_logger as logger
from ..utils.url_utils import dedupe_links, chunked, to_score

PRIORITY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "prioritized_links": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "url": {"type": "string", "description": "The URL"},
                    "importance": {"type": "integer", "minimum": 1, "maximum": 100},
                    "category": {"type": "string", "enum": LINK_CATEGORIES},
                    "reasoning": {"type": "string", "description": "Brief reason for the score"},
                },
                "required": ["url", "importance", "category", "reasoning"],
            },
        }
    },
    "required": ["prioritized_links"],
}


def build_firm_context(firm_name: str, firm_info: Optional[Dict[str, Any]] = None) -> str:
    """Render the SEBI record and any known facts as a prompt block"""
    firm_info = firm_info or {}
    parts = [f'SEBI REGISTERED FIRM CONTEXT FOR "{firm_name}"']

    if firm_info.get("registration_no"):
        parts.append(f"SEBI Registration No: {firm_info['registration_no']}")
    if firm_info.get("contact_person"):
        parts.append(f"Official Contact Person: {firm_info['contact_person']}")
        parts.append("  Prioritize LinkedIn profiles matching this exact name.")
    if firm_info.get("email"):
        parts.append(f"Official Email: {firm_info['email']}")
        domain = firm_info["email"].split("@")[-1] if "@" in firm_info["email"] else ""
        if domain:
            parts.append(f"  Email Domain: {domain} (use for profile validation)")
    location = firm_info.get("location") or firm_info.get("headquarters")
    if location:
        parts.append(f"Location: {location}")
    if firm_info.get("address"):
        parts.append(f"Registered Address: {firm_info['address']}")
    if firm_info.get("validity"):
        parts.append(f"SEBI Validity: {firm_info['validity']}")

    for key, label in [
        ("known_team", "Known Team Members"),
        ("known_portfolio", "Known Portfolio Companies"),
        ("sectors", "Focus Sectors"),
        ("fund_names", "Known Funds"),
    ]:
        if firm_info.get(key):
            parts.append(f"{label}: {', '.join(firm_info[key])}")

    return "\n".join(parts)


class LinkPrioritizationAgent:
    """Agent for scoring LinkedIn URLs in batches"""

    def __init__(self, llm: LLMService, batch_size: Optional[int] = None, batch_delay: Optional[float] = None):
        self.llm = llm
        self.batch_size = batch_size or settings.LINKEDIN_BATCH_SIZE
        self.batch_delay = settings.LINKEDIN_BATCH_DELAY if batch_delay is None else batch_delay

    async def execute(
        self,
        links: List[Any],
        firm_name: str,
        firm_info: Optional[Dict[str, Any]] = None,
    ) -> List[PrioritizedLink]:
        """
        Score and sort LinkedIn links.

        Args:
            links: URL strings or dicts with url and text/context
            firm_name: Name of the firm under research
            firm_info: SEBI fields and known facts used as scoring context

        Returns:
            Scored links, most important first
        """
        logger.info(f"Prioritizing {len(links)} LinkedIn URLs for {firm_name}")
        if not links:
            logger.warning("No LinkedIn URLs to prioritize")
            return []

        unique = dedupe_links([self._as_link(link) for link in links])
        logger.info(f"Unique LinkedIn URLs after dedup: {len(unique)}")

        batches = chunked(unique, self.batch_size)
        prioritized: List[PrioritizedLink] = []
        for i, batch in enumerate(batches):
            logger.info(f"[{i + 1}/{len(batches)}] Scoring batch of {len(batch)} LinkedIn URLs")
            prioritized.extend(await self.prioritize_batch(batch, firm_name, firm_info))
            if i < len(batches) - 1:
                await asyncio.sleep(self.batch_delay)

        prioritized.sort(key=lambda link: link.importance, reverse=True)

        high = sum(1 for link in prioritized if link.importance >= 90)
        medium = sum(1 for link in prioritized if 70 <= link.importance < 90)
        logger.info(
            f"Prioritization complete: {len(prioritized)} scored, "
            f"{high} high, {medium} medium, {len(prioritized) - high - medium} low"
        )
        return prioritized

    async def prioritize_batch(
        self,
        batch: List[Dict[str, Any]],
        firm_name: str,
        firm_info: Optional[Dict[str, Any]] = None,
    ) -> List[PrioritizedLink]:
        data = await self.llm.generate_structured(
            self._build_prompt(batch, firm_name, firm_info or {}),
            PRIORITY_SCHEMA,
            name="prioritized_links",
        )

        results = []
        for item in data.get("prioritized_links") or []:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            category = item.get("category")
            results.append(PrioritizedLink(
                url=item["url"],
                importance=to_score(item.get("importance")),
                category=category if category in LINK_CATEGORIES else "other",
                reasoning=item.get("reasoning") or "",
            ))
        return results

    @staticmethod
    def _as_link(link: Any) -> Dict[str, Any]:
        if isinstance(link, str):
            return {"url": link, "text": "", "source": "linkedin"}
        return {
            "url": link.get("url", ""),
            "text": link.get("text") or link.get("context") or "",
            "source": link.get("source") or "linkedin",
        }

    def _build_prompt(self, batch: List[Dict[str, Any]], firm_name: str, firm_info: Dict[str, Any]) -> str:
        link_list = "\n\n".join(
            f"{idx + 1}. {link['url']}\n   Context: {link.get('text') or 'No context'}"
            for idx, link in enumerate(batch)
        )
        contact = firm_info.get("contact_person") or "N/A"
        return f"""
You are a VC research analyst prioritizing LinkedIn URLs for research on the Indian VC firm "{firm_name}".

{build_firm_context(firm_name, firm_info)}

DISCOVERED LINKEDIN URLS:
{link_list}

We want the profiles that tell us most about the investment team, portfolio companies
and their founders, co-investors, fund history and investment strategy.

SCORING:
- 95-100: the contact person "{contact}", the firm's own company page, its Managing/General/
  Founding Partners, Partners, Principals, Directors, anyone currently at "{firm_name}".
- 80-94: analysts, associates and VPs at the firm, founders/CEOs of known portfolio companies,
  former partners of the firm.
- 60-79: junior investment staff, portfolio company executives, advisors and venture partners,
  frequent co-investors.
- 40-59: loosely connected founders, interns, consultants, vague affiliations.
- Below 40: unrelated profiles, duplicates, unrelated company pages.

Prefer current positions, profiles located in India and names matching the SEBI record.

CATEGORIES: {", ".join(LINK_CATEGORIES)}.

Return every URL with an importance score, a category and a one-line reason.
"""
