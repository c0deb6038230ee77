"""
News Agent Module

Collects deal and fund intelligence from news coverage of a firm.
"""

import asyncio
from typing import Dict, Any, List

from ..schemas import FirmRecord, NewsInsights, NOT_AVAILABLE
from ..services.llm import LLMService
from ..utils.logger import agents_logger as logger
from ..utils.url_utils import sanitize_text

CONTEXT_LIMIT = 20000
ANALYSIS_LIMIT = 5000

NEWS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "fund_details": {"type": "array", "items": {"type": "string"}},
        "recent_activity": {"type": "string"},
        "avg_cheque": {"type": "string"},
        "portfolio_mentions": {"type": "array", "items": {"type": "string"}},
    },
}


class NewsAgent:
    """Agent for news search, analysis and structured extraction"""

    def __init__(self, llm: LLMService):
        self.llm = llm

    def build_queries(self, firm_name: str) -> List[str]:
        return [
            f'"{firm_name}" investment "Series A" OR "Series B"',
            f'"{firm_name}" fund size announcement',
            f'"{firm_name}" new fund launch',
            f'"{firm_name}" portfolio companies list',
        ]

    async def execute(self, record: FirmRecord) -> NewsInsights:
        firm_name = record.name
        logger.info(f"News: gathering deal intelligence for {firm_name}")

        results = await asyncio.gather(*(self.llm.generate_content(q) for q in self.build_queries(firm_name)))
        context = sanitize_text("\n\n=== NEXT SEARCH RESULT ===\n\n".join(results))

        analysis = await self.llm.generate_content(self._analysis_prompt(firm_name, context))
        data = await self.llm.generate_structured(
            self._extraction_prompt(analysis),
            NEWS_SCHEMA,
            name="news_insights",
        )

        insights = NewsInsights(
            fund_details=[str(x) for x in data.get("fund_details") or []],
            recent_activity=data.get("recent_activity") or NOT_AVAILABLE,
            avg_cheque=data.get("avg_cheque") or NOT_AVAILABLE,
            portfolio_mentions=[str(x) for x in data.get("portfolio_mentions") or []],
        )
        logger.info(f"News: {len(insights.fund_details)} funds found for {firm_name}")
        return insights

    def _analysis_prompt(self, firm_name: str, context: str) -> str:
        return f"""
Analyze these news search results for the VC firm "{firm_name}".

SEARCH CONTEXT:
{context[:CONTEXT_LIMIT]}

Extract, with exact numbers wherever possible:
1. Fund names and sizes (e.g. "Fund I: $50M")
2. Deal activity in the last 24 months
3. Average cheque size
4. Portfolio companies mentioned in the news
"""

    def _extraction_prompt(self, analysis: str) -> str:
        return f"""
Convert the analysis below into JSON.

ANALYSIS:
{analysis[:ANALYSIS_LIMIT]}

Rules:
- Use "{NOT_AVAILABLE}" for any value that is not found.
- Keep summaries under 100 words and do not repeat text.

Fields: fund_details (list of "Fund: size" strings), recent_activity, avg_cheque,
portfolio_mentions (list of company names).
"""
