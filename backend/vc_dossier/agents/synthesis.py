"""
Synthesis Agent Module

Merges everything gathered for a firm into the 16-point intelligence
report, and optionally re-writes GP backgrounds from enriched profiles.

Key Features:
- SEBI, website-fact, news, LinkedIn and company-page context blocks
- Free-text analysis pass followed by schema-constrained extraction
- Tolerant coercion of the model output into FirmReport
"""

import json
from typing import Dict, Any, List, Optional

from ..schemas import (
    FirmRecord,
    FirmReport,
    GPEntry,
    KnowledgeBase,
    LinkedInCompany,
    LinkedInProfile,
    NewsInsights,
    PageAnalysis,
    FACT_CATEGORIES,
    NOT_AVAILABLE,
)
from ..services.llm import LLMService
from ..utils.logger import agents_logger as logger

ANALYSIS_LIMIT = 20000
FACTS_PER_CATEGORY = 10
PROFILES_IN_CONTEXT = 5

REPORT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "firm_name": {"type": "string", "description": "Official SEBI registered firm name"},
        "fund_names": {
            "type": "array",
            "items": {"type": "string"},
            "description": "All funds managed by the firm",
        },
        "fund_sizes": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Fund sizes with currency and year, e.g. 'Fund I: $100M (2018)'",
        },
        "gps": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Full name and title, e.g. 'Jane Doe, Managing Partner'"},
                    "background": {"type": "string", "description": "3-5 sentence professional background"},
                },
                "required": ["name", "background"],
            },
        },
        "team_size": {"type": "string", "description": "Investment team size, e.g. '8-10 members'"},
        "recent_funding_activity": {"type": "string", "description": "Deals since 2020 with amounts and dates"},
        "fund_start_date": {"type": "string", "description": "Launch of the earliest fund"},
        "firm_start_date": {"type": "string", "description": "Founding date of the firm"},
        "portfolio_companies": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Deduplicated portfolio companies",
        },
        "past_performance": {"type": "string", "description": "Exits, IPOs and notable returns"},
        "industry_focus": {"type": "string", "description": "Primary sectors and themes"},
        "deal_velocity": {"type": "string", "description": "Deals per year in recent years"},
        "avg_cheque_size": {"type": "string", "description": "Typical investment range"},
        "cheque_size_pct_round": {"type": "string", "description": "Typical share of a round taken"},
        "primary_coinvestors": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Frequent co-investors",
        },
    },
    "required": [
        "firm_name", "fund_names", "fund_sizes", "gps", "team_size",
        "recent_funding_activity", "fund_start_date", "firm_start_date",
        "portfolio_companies", "past_performance", "industry_focus", "deal_velocity",
        "avg_cheque_size", "cheque_size_pct_round", "primary_coinvestors",
    ],
}

DATA_POINTS = """
1. Firm name (exact SEBI name)
2. Fund names
3. Fund sizes / AUM with years
4. GPs: full names and titles
5. GP backgrounds: education and previous roles
6. Team size
7. Recent funding activity (2020 onwards) with amounts and dates
8. Fund start date
9. Firm start date
10. Portfolio companies
11. Past performance: exits, IPOs, returns
12. Industry focus
13. Deal velocity (deals per year)
14. Average cheque size
15. Cheque size as % of round
16. Primary co-investors
"""


def _as_text(value: Any) -> str:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, list):
        value = "; ".join(str(v) for v in value if v)
    text = str(value).strip()
    return text or NOT_AVAILABLE


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() and value.strip() != NOT_AVAILABLE else []
    return [str(v).strip() for v in value if v and str(v).strip()]


def _as_gps(value: Any) -> List[GPEntry]:
    gps = []
    for item in value or []:
        if isinstance(item, dict) and item.get("name"):
            gps.append(GPEntry(name=str(item["name"]).strip(), background=_as_text(item.get("background"))))
        elif isinstance(item, str) and item.strip():
            gps.append(GPEntry(name=item.strip()))
    return gps


def build_report(data: Dict[str, Any], record: FirmRecord) -> FirmReport:
    """Coerce model output into a FirmReport, filling gaps with defaults"""
    return FirmReport(
        firm_name=(data.get("firm_name") or record.name).strip(),
        fund_names=_as_list(data.get("fund_names")),
        fund_sizes=_as_list(data.get("fund_sizes")),
        gps=_as_gps(data.get("gps")),
        team_size=_as_text(data.get("team_size")),
        recent_funding_activity=_as_text(data.get("recent_funding_activity")),
        fund_start_date=_as_text(data.get("fund_start_date")),
        firm_start_date=_as_text(data.get("firm_start_date")),
        portfolio_companies=_as_list(data.get("portfolio_companies")),
        past_performance=_as_text(data.get("past_performance")),
        industry_focus=_as_text(data.get("industry_focus")),
        deal_velocity=_as_text(data.get("deal_velocity")),
        avg_cheque_size=_as_text(data.get("avg_cheque_size")),
        cheque_size_pct_round=_as_text(data.get("cheque_size_pct_round")),
        primary_coinvestors=_as_list(data.get("primary_coinvestors")),
    )


def build_sebi_context(record: FirmRecord) -> str:
    return "\n".join([
        f"Firm Name: {record.name}",
        f"SEBI Registration No.: {record.registration_no or 'N/A'}",
        f"Contact Person: {record.contact_person or 'N/A'}",
        f"Email: {record.email or 'N/A'}",
        f"Address: {record.address or 'N/A'}",
        f"Validity: {record.validity or 'N/A'}",
    ])


def build_website_context(page_analyses: List[PageAnalysis]) -> str:
    """Per-page facts followed by the top facts of each category"""
    if not page_analyses:
        return "WEBSITE ANALYSIS: No pages analyzed."

    parts = [f"WEBSITE ANALYSIS ({len(page_analyses)} pages analyzed):"]
    by_category: Dict[str, List[str]] = {category: [] for category in FACT_CATEGORIES}

    for analysis in page_analyses:
        if not analysis.facts:
            continue
        parts.append(f"\nPage: {analysis.page_type} ({analysis.url})")
        parts.append(f"  Summary: {analysis.page_summary}")
        parts.append("  Facts:")
        for fact in analysis.facts:
            parts.append(f"  - [{fact.category}] {fact.fact} (confidence: {fact.confidence}%)")
            by_category.setdefault(fact.category, []).append(fact.fact)

    parts.append("\n--- FACTS BY CATEGORY ---")
    for category, facts in by_category.items():
        if not facts:
            continue
        parts.append(f"\n{category.upper().replace('_', ' ')} ({len(facts)} facts):")
        parts.extend(f"  * {fact}" for fact in facts[:FACTS_PER_CATEGORY])
        if len(facts) > FACTS_PER_CATEGORY:
            parts.append(f"  ... and {len(facts) - FACTS_PER_CATEGORY} more")

    return "\n".join(parts)


def build_news_context(news: Optional[NewsInsights]) -> str:
    if news is None:
        return "NEWS INSIGHTS: None gathered."
    return "\n".join([
        "NEWS INSIGHTS:",
        f"  Fund details: {', '.join(news.fund_details) or NOT_AVAILABLE}",
        f"  Recent activity: {news.recent_activity}",
        f"  Average cheque: {news.avg_cheque}",
        f"  Portfolio mentions: {', '.join(news.portfolio_mentions) or NOT_AVAILABLE}",
    ])


def build_linkedin_context(profiles: List[LinkedInProfile], label: str = "LINKEDIN PROFILES") -> str:
    if not profiles:
        return f"{label}: No profiles scraped."
    lines = [
        f"- {p.name or 'Unknown'}: {p.headline or 'N/A'} ({p.url or ''})"
        for p in profiles[:PROFILES_IN_CONTEXT]
    ]
    return f"{label} ({len(profiles)} scraped):\n" + "\n".join(lines) + "\n..."


def build_company_context(companies: List[LinkedInCompany]) -> str:
    if not companies:
        return "LINKEDIN COMPANY PAGES: No company pages scraped."

    parts = [f"LINKEDIN COMPANY PAGES ({len(companies)} scraped):"]
    for company in companies:
        raw = company.raw or {}
        parts.append(f"\nCompany: {company.name}")
        parts.append(f"  Tagline: {raw.get('tagline') or 'N/A'}")
        parts.append(f"  URL: {company.url}")
        parts.append(f"  Description: {company.description or 'N/A'}")
        parts.append(f"  Industry: {company.industry or 'N/A'}")
        parts.append(f"  Employees (LinkedIn): {raw.get('employees_in_linkedin') or 'N/A'}")
        parts.append(f"  Company Size Range: {company.company_size or 'N/A'}")
        parts.append(f"  Founded: {company.founded or 'N/A'}")
        parts.append(f"  Headquarters: {company.headquarters or 'N/A'}")
        parts.append(f"  Website: {company.website or 'N/A'}")

        specialties = company.specialties
        if isinstance(specialties, list) and specialties:
            parts.append(f"  Specialties: {', '.join(str(s) for s in specialties)}")
        elif isinstance(specialties, str) and specialties:
            parts.append(f"  Specialties: {specialties}")

        locations = [
            f"{loc.get('city') or ''}, {loc.get('country') or ''} ({'HQ' if loc.get('is_headquarter') else 'Office'})"
            for loc in raw.get("locations") or []
            if isinstance(loc, dict) and (loc.get("city") or loc.get("country"))
        ]
        if locations:
            parts.append(f"  Office Locations: {'; '.join(locations)}")

        similar = [s.get("name") for s in raw.get("similar_companies") or [] if isinstance(s, dict) and s.get("name")]
        if similar:
            parts.append(f"  Similar Companies: {', '.join(similar)}")

    return "\n".join(parts)


class SynthesisAgent:
    """Agent for compiling the final report"""

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def execute(self, knowledge_base: KnowledgeBase) -> FirmReport:
        record = knowledge_base.target_record
        logger.info(f"Synthesis: compiling report for {record.name}")

        analysis = await self.llm.generate_content(
            self.build_analysis_prompt(knowledge_base), grounded=False
        )
        data = await self.llm.generate_structured(
            self._extraction_prompt(record, analysis),
            REPORT_SCHEMA,
            name="firm_report",
        )

        report = build_report(data, record)
        logger.info(f"Synthesis complete for {report.firm_name}")
        return report

    def build_analysis_prompt(self, kb: KnowledgeBase) -> str:
        record = kb.target_record
        gp_context = (
            build_linkedin_context(kb.gp_profiles, "ENRICHED GP PROFILES") if kb.gp_profiles else ""
        )
        return f"""
You are a senior VC research analyst writing an intelligence report on the Indian VC firm "{record.name}".

=== OFFICIAL SEBI REGISTRATION ===
{build_sebi_context(record)}

=== EXTRACTED INTELLIGENCE ===

{build_website_context(kb.page_analyses)}

{build_news_context(kb.news)}

{build_linkedin_context(kb.linkedin_profiles)}

{gp_context}

{build_company_context(kb.linkedin_companies)}

=== INSTRUCTIONS ===
Sources: the SEBI record is ground truth for name, contact and registration. Website facts are
pre-categorized with confidence scores. LinkedIn profiles cover team members and founders;
enriched GP profiles are the best source for GP backgrounds. Company pages give size,
founding year and focus.

Rules:
- Merge people and companies that appear in several sources into one entry.
- On conflicts prefer website facts for fund sizes, specific dates over bare years,
  and combine website facts with LinkedIn data for people and firm stats.
- Prefer facts with confidence above 80.
- Include only information present in the sources above.

Cover all 16 data points:
{DATA_POINTS}
"""

    def _extraction_prompt(self, record: FirmRecord, analysis: str) -> str:
        return f"""
Produce the structured report for the VC firm "{record.name}" (SEBI: {record.registration_no or 'N/A'}).

SYNTHESIZED ANALYSIS:
{analysis[:ANALYSIS_LIMIT]}

Checks:
- firm_name must be exactly "{record.name}".
- gps holds objects with "name" and a 3-5 sentence "background".
- Fund sizes include currency and year, e.g. "$100M (2020)".
- Dates are as specific as the analysis allows.
- Portfolio companies are deduplicated.
- Use "{NOT_AVAILABLE}" for anything missing. Never invent information.
"""


class GPBackgroundEnhancer:
    """Re-writes GP entries of a finished report from enriched LinkedIn profiles"""

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def execute(
        self,
        report: FirmReport,
        gp_profiles: List[LinkedInProfile],
        record: Optional[FirmRecord] = None,
    ) -> FirmReport:
        if not gp_profiles:
            logger.info("GP enhancement: no GP profiles, keeping report as is")
            return report

        logger.info(f"GP enhancement: enhancing with {len(gp_profiles)} LinkedIn profile(s)")
        profiles_json = json.dumps(
            [p.model_dump(exclude={"raw"}) for p in gp_profiles], indent=2, ensure_ascii=False, default=str
        )
        prompt = f"""
You are updating a VC firm intelligence report with newly scraped GP LinkedIn profiles.

EXISTING REPORT (baseline, keep its information):
{report.model_dump_json(indent=2)}

NEW GP LINKEDIN PROFILES:
{profiles_json}

Produce the complete report again:
- gps: add titles from LinkedIn headlines (e.g. "Jane Doe, Managing Partner") and replace each
  background with 3-5 detailed sentences on previous companies, years of experience,
  education and achievements taken from the profiles.
- team_size: update only if the profiles support a better estimate.
- Every other field: copy from the existing report unchanged.
- A GP without a matching profile keeps the existing background.
Do not invent information.
"""
        data = await self.llm.generate_structured(prompt, REPORT_SCHEMA, name="firm_report")
        enhanced = build_report(data, record or FirmRecord(name=report.firm_name))
        if not enhanced.gps:
            enhanced.gps = report.gps
        logger.info("GP enhancement: report regenerated with detailed GP backgrounds")
        return enhanced
