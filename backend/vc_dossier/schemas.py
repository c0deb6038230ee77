"""
Schemas Module

Pydantic models for the JSON-shaped records passed between pipeline phases.
Fields are deliberately permissive: most values come back from a language
model and are frequently partial.

Key Features:
- SEBI registry records with their original column names
- URL discovery, page analysis and prioritization records
- Provider-neutral LinkedIn profile and company records
- The 16-field firm report and the knowledge base used to build it
"""
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

NOT_AVAILABLE = "Not available"

FACT_CATEGORIES = [
    "fund_info",
    "team_member",
    "portfolio_company",
    "contact_info",
    "strategy",
    "news_deal",
    "other",
]

LINK_CATEGORIES = [
    "linkedin_gp",
    "linkedin_founder",
    "portfolio_company",
    "news_recent",
    "news_old",
    "fund_info",
    "firm_official",
    "database",
    "other",
]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class FirmRecord(BaseModel):
    """A row of the SEBI AIF registry. Unknown columns are preserved."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(alias="Name")
    registration_no: Optional[str] = Field(None, alias="Registration No.")
    contact_person: Optional[str] = Field(None, alias="Contact Person")
    email: Optional[str] = Field(None, alias="E-mail")
    address: Optional[str] = Field(None, alias="Address")
    validity: Optional[str] = Field(None, alias="Validity")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Firm name is the only mandatory column."""
        if not v or not v.strip():
            raise ValueError("Firm name must not be empty")
        return v.strip()

    def to_registry_dict(self) -> Dict[str, Any]:
        """Dump back to registry column names, dropping empty columns."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DiscoveredURL(BaseModel):
    """A URL found during discovery, tagged with context and an importance score."""
    url: str
    context: str = ""
    importance: int = 0
    source: Optional[str] = None


class DiscoveryResult(BaseModel):
    urls: List[DiscoveredURL] = []


class PageLink(BaseModel):
    """An anchor extracted from a cleaned page."""
    url: str
    text: str = ""


class ScrapeResult(BaseModel):
    """Outcome of rendering a single page in the headless browser."""
    url: str
    html: Optional[str] = None
    status_code: int = 0
    error: Optional[str] = None
    scraped_at: str = Field(default_factory=_utcnow)

    @property
    def ok(self) -> bool:
        return bool(self.html) and self.status_code == 200


class CleanedPage(BaseModel):
    title: str = "Untitled"
    cleaned_html: str = ""
    plain_text: str = ""
    links: List[PageLink] = []
    cleaned_at: str = Field(default_factory=_utcnow)


class PageFact(BaseModel):
    category: str = "other"
    fact: str
    confidence: int = 0

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        """Unknown categories are folded into 'other'."""
        return v if v in FACT_CATEGORIES else "other"


class PageAnalysis(BaseModel):
    url: str = ""
    page_type: str = "general"
    is_relevant: bool = False
    page_summary: str = ""
    facts: List[PageFact] = []
    error: Optional[str] = None


class PrioritizedLink(BaseModel):
    url: str
    importance: int = 0
    category: str = "other"
    reasoning: str = ""


class NewsInsights(BaseModel):
    fund_details: List[str] = []
    recent_activity: str = NOT_AVAILABLE
    avg_cheque: str = NOT_AVAILABLE
    portfolio_mentions: List[str] = []


class LinkedInProfile(BaseModel):
    """Provider-neutral LinkedIn person profile."""
    url: Optional[str] = None
    name: Optional[str] = None
    headline: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    experience: List[Any] = []
    education: List[Any] = []
    skills: List[Any] = []
    connections: Optional[Any] = None
    followers: Optional[Any] = None
    profile_picture: Optional[str] = None
    contact_info: Dict[str, Any] = {}
    raw: Dict[str, Any] = {}


class LinkedInCompany(BaseModel):
    """Provider-neutral LinkedIn company page."""
    url: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[Any] = None
    company_size: Optional[Any] = None
    headquarters: Optional[Any] = None
    founded: Optional[Any] = None
    specialties: Optional[Any] = None
    followers: Optional[Any] = None
    logo: Optional[str] = None
    raw: Dict[str, Any] = {}


class ScrapeOutcome(BaseModel):
    """Result of a LinkedIn provider call. Failures are data, not exceptions."""
    success: bool
    items: List[Dict[str, Any]] = []
    message: str = ""


class GPEntry(BaseModel):
    name: str
    background: str = NOT_AVAILABLE


class FirmReport(BaseModel):
    """The synthesized 16-point intelligence report for one firm."""
    firm_name: str
    fund_names: List[str] = []
    fund_sizes: List[str] = []
    gps: List[GPEntry] = []
    team_size: str = NOT_AVAILABLE
    recent_funding_activity: str = NOT_AVAILABLE
    fund_start_date: str = NOT_AVAILABLE
    firm_start_date: str = NOT_AVAILABLE
    portfolio_companies: List[str] = []
    past_performance: str = NOT_AVAILABLE
    industry_focus: str = NOT_AVAILABLE
    deal_velocity: str = NOT_AVAILABLE
    avg_cheque_size: str = NOT_AVAILABLE
    cheque_size_pct_round: str = NOT_AVAILABLE
    primary_coinvestors: List[str] = []


class KnowledgeBase(BaseModel):
    """Everything accumulated for a firm before synthesis."""
    target_record: FirmRecord
    discovery: DiscoveryResult = DiscoveryResult()
    news: Optional[NewsInsights] = None
    page_analyses: List[PageAnalysis] = []
    linkedin_profiles: List[LinkedInProfile] = []
    linkedin_companies: List[LinkedInCompany] = []
    gp_profiles: List[LinkedInProfile] = []


class FirmResult(BaseModel):
    success: bool
    firm_name: str
    firm_slug: str
    report: Optional[FirmReport] = None
    stats: Dict[str, Any] = {}
    error: Optional[str] = None
