"""
URL and text helpers shared by the pipeline phases.

Covers URL normalization and de-duplication, LinkedIn classification,
regex page-type detection and the name heuristics used for GP discovery.
"""
import re
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

LINKEDIN_PATTERNS = [
    "linkedin.com/in/",
    "linkedin.com/company/",
    "linkedin.com/pub/",
]

EXCLUDED_DOMAINS = ["sebi.gov.in", ".gov.in"]

# Ordered: the first matching type wins
PAGE_TYPE_PATTERNS = [
    ("team", re.compile(r"team|people|partners|leadership|our-team|who-we-are|founders", re.I)),
    ("portfolio", re.compile(r"portfolio|companies|investments|startups", re.I)),
    ("fund", re.compile(r"fund|aum|strategy|thesis|approach", re.I)),
    ("news", re.compile(r"news|press|media|blog|insights|announcement", re.I)),
    ("contact", re.compile(r"contact|reach-us|get-in-touch", re.I)),
    ("about", re.compile(r"about|story|history|overview", re.I)),
]

TEAM_TEXT_PATTERN = re.compile(
    r"\b(managing partner|general partner|founding partner|our team|co-founder)\b", re.I
)

_SCHEME_RE = re.compile(r"^https?://(www\.)?")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")
_PAREN_RE = re.compile(r"\s*\(.*?\)\s*")

LinkLike = Union[str, Dict[str, Any]]


def _url_of(link: LinkLike) -> str:
    if isinstance(link, dict):
        return link.get("url") or ""
    return link or ""


def normalize_url(url: str) -> str:
    """Canonical form used for de-duplication. Idempotent."""
    normalized = (url or "").strip().lower()
    normalized = _SCHEME_RE.sub("", normalized)
    normalized = normalized.split("#")[0].split("?")[0]
    return normalized.rstrip("/")


def dedupe_links(links: Iterable[LinkLike]) -> List[LinkLike]:
    """
    One entry per normalized URL. When duplicates carry different anchor
    text or context, the longest description is kept.
    """
    best: Dict[str, LinkLike] = {}
    order: List[str] = []
    for link in links:
        key = normalize_url(_url_of(link))
        if not key:
            continue
        if key not in best:
            best[key] = link
            order.append(key)
        elif len(_describe(link)) > len(_describe(best[key])):
            best[key] = link
    return [best[key] for key in order]


def _describe(link: LinkLike) -> str:
    if isinstance(link, dict):
        return link.get("text") or link.get("context") or ""
    return ""


def filter_scraped_urls(links: Iterable[LinkLike], scraped: Iterable[str]) -> List[LinkLike]:
    """Drop links whose normalized URL was already scraped"""
    seen = {normalize_url(u) for u in scraped}
    return [link for link in links if normalize_url(_url_of(link)) not in seen]


def is_linkedin(url: str) -> bool:
    url = url or ""
    return any(pattern in url for pattern in LINKEDIN_PATTERNS)


def classify_urls(urls: Iterable[LinkLike]) -> Tuple[List[LinkLike], List[LinkLike]]:
    """Partition discovered URLs into (regular, linkedin)"""
    regular, linkedin = [], []
    for item in urls:
        if is_linkedin(_url_of(item)):
            linkedin.append(item)
        else:
            regular.append(item)
    return regular, linkedin


def is_linkedin_company(url: str) -> bool:
    """Company and school pages are scraped with the company dataset"""
    url = url or ""
    return "/company/" in url or "/school/" in url


def split_linkedin_urls(urls: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Partition LinkedIn URLs into (profiles, companies)"""
    profiles, companies = [], []
    for url in urls:
        (companies if is_linkedin_company(url) else profiles).append(url)
    return profiles, companies


def chunked(items: Sequence[Any], size: int) -> List[List[Any]]:
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def detect_page_type(url: str, text: str = "") -> str:
    """
    Classify a page from its URL path, falling back to tell-tale phrases in
    the page text for team pages.
    """
    path = normalize_url(url)
    path = path.split("/", 1)[1] if "/" in path else ""
    for page_type, pattern in PAGE_TYPE_PATTERNS:
        if path and pattern.search(path):
            return page_type
    if text and len(TEAM_TEXT_PATTERN.findall(text[:20000])) >= 3:
        return "team"
    return "general"


def is_valid_gp_name(name: Any) -> bool:
    if not name or not isinstance(name, str):
        return False
    trimmed = name.strip()
    if len(trimmed) < 3 or len(trimmed) > 100:
        return False
    return bool(re.search(r"[a-zA-Z]", trimmed))


def clean_person_name(name: str) -> str:
    """'Jane Doe (Managing Partner)' -> 'Jane Doe'"""
    return _PAREN_RE.sub(" ", name or "").strip()


def is_excluded_domain(url: str, title: str = "") -> bool:
    """Government and SEBI pages never count as a firm homepage"""
    url = url or ""
    if any(domain in url for domain in EXCLUDED_DOMAINS):
        return True
    return bool(re.search(r"sebi", title or "", re.I))


def sanitize_text(text: str) -> str:
    return _NON_PRINTABLE_RE.sub("", text or "")


def to_score(value: Any, default: int = 0) -> int:
    """Coerce a model-provided score to an int clamped to 0..100"""
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(0, min(100, score))
