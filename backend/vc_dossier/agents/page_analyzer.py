"""
Page Analyzer Module

Extracts VC-relevant facts from the plain text of a single scraped page.
"""

from typing import Dict, Any

from ..schemas import PageAnalysis, PageFact, FACT_CATEGORIES
from ..services.llm import LLMService
from ..utils.logger import agents_logger as logger
from ..utils.url_utils import to_score

TEXT_LIMIT = 40000

ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "is_relevant": {
            "type": "boolean",
            "description": "True if the page holds any useful VC information (team, portfolio, funds, contact).",
        },
        "page_summary": {
            "type": "string",
            "description": "One-sentence summary of the page.",
        },
        "facts": {
            "type": "array",
            "description": "Specific, high-value facts found on the page.",
            "items": {
                "type": "object",
                "properties": {
                    "category": {"type": "string", "enum": FACT_CATEGORIES},
                    "fact": {
                        "type": "string",
                        "description": "The extracted fact, with numbers, dates and names.",
                    },
                    "confidence": {"type": "integer", "minimum": 1, "maximum": 100},
                },
                "required": ["category", "fact", "confidence"],
            },
        },
    },
    "required": ["is_relevant", "page_summary", "facts"],
}

TYPE_INSTRUCTIONS = {
    "team": """
- Extract everything about each person.
- Where a full bio paragraph exists, keep the sentences describing their background
  rather than a two-word summary such as "Ex-Google".
- Example fact: "Previously a Managing Director at Matrix Partners where she led
  investments in Ola and Quikr. Holds an MBA from Harvard."
""",
    "portfolio": """
- Extract every company with its details.
- From testimonials or case studies, keep the metrics mentioned (e.g. "Grew revenue 10x").
""",
}

DEFAULT_INSTRUCTIONS = """
- Look for "About" sections mentioning AUM, history or fund closings.
- Look for "Strategy" sections defining cheque sizes (e.g. "$1M - $5M") and sectors.
"""


class PageAnalyzer:
    """
    Agent for per-page fact extraction.
    A failed model call degrades to a non-relevant analysis instead of raising.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def analyze(self, text: str, url: str, page_type: str = "general") -> PageAnalysis:
        logger.info(f"Analyzing {page_type} page: {url}")
        prompt = self.build_prompt(text, url, page_type)

        try:
            data = await self.llm.generate_structured(prompt, ANALYSIS_SCHEMA, name="page_analysis")
        except Exception as e:
            logger.error(f"Page analysis failed for {url}: {str(e)}")
            return PageAnalysis(url=url, page_type=page_type, is_relevant=False, error=str(e))

        facts = []
        for item in data.get("facts") or []:
            if isinstance(item, dict) and item.get("fact"):
                facts.append(PageFact(
                    category=item.get("category") or "other",
                    fact=str(item["fact"]),
                    confidence=to_score(item.get("confidence")),
                ))

        analysis = PageAnalysis(
            url=url,
            page_type=page_type,
            is_relevant=bool(data.get("is_relevant")),
            page_summary=data.get("page_summary") or "",
            facts=facts,
        )
        if analysis.is_relevant:
            logger.info(f"Extracted {len(facts)} facts from {url}")
        else:
            logger.info(f"Page deemed irrelevant: {url}")
        return analysis

    def build_prompt(self, text: str, url: str, page_type: str) -> str:
        instructions = TYPE_INSTRUCTIONS.get(page_type, DEFAULT_INSTRUCTIONS)
        return f"""
You are a VC data analyst. Extract comprehensive details from one webpage of a venture capital firm.

PAGE CONTEXT:
- URL: {url}
- Type: {page_type.upper()}

PAGE CONTENT:
{(text or "")[:TEXT_LIMIT]}

Extract all relevant information on the page; do not abbreviate.

FOCUS AREAS:
1. Team and GPs: full name, exact title, education, full professional history,
   board seats and investments led. Include text from expanded bios and modals.
2. Funds and AUM: exact fund names, exact sizes (e.g. "$350 Million", "2000 Crore"),
   vintage and closing dates, LPs if mentioned.
3. Portfolio: company name, sector, description, stage, status and any deal details
   (amount, year, co-investors).

PAGE-SPECIFIC GUIDANCE:
{instructions}
Prefer long, detailed facts over short summaries. Ignore navigation, footers and
generic marketing slogans.
"""
