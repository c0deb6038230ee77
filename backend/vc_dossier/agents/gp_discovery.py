"""
GP Discovery Module

Collects candidate General Partner names from data already gathered for a
firm, without another model call.
"""

import re
from typing import List, Optional, Iterable

from ..schemas import FirmRecord, PageAnalysis, LinkedInProfile
from ..utils.logger import agents_logger as logger
from ..utils.url_utils import is_valid_gp_name

NAME_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2})\b")

GENERIC_TITLES = {
    "Managing Partner",
    "General Partner",
    "Partner",
    "Founder",
    "CEO",
    "Director",
}

PARTNER_MARKERS = ("partner", " gp", "general partner", "managing director", "founder")


def extract_name_from_fact(fact: str) -> Optional[str]:
    """
    First capitalized two- or three-word name in a team fact.

    "Jane Doe is Managing Partner" -> "Jane Doe"
    """
    match = NAME_PATTERN.search(fact or "")
    if not match:
        return None
    name = match.group(1)
    return None if name in GENERIC_TITLES else name


def filter_gp_names(names: Iterable[str]) -> List[str]:
    return [name.strip() for name in names if is_valid_gp_name(name)]


class GPDiscoveryService:
    """Finds GP names in the SEBI record, page facts and LinkedIn headlines"""

    def discover(
        self,
        page_analyses: List[PageAnalysis],
        linkedin_profiles: List[LinkedInProfile],
        record: FirmRecord,
    ) -> List[str]:
        names: List[str] = []

        def _add(name: Optional[str]) -> None:
            if name and name not in names:
                names.append(name)

        if record.contact_person and record.contact_person.strip():
            _add(record.contact_person.strip())
            logger.info(f"GP discovery: SEBI contact {record.contact_person.strip()}")

        team_names = 0
        for analysis in page_analyses or []:
            for fact in analysis.facts:
                if fact.category != "team_member":
                    continue
                name = extract_name_from_fact(fact.fact)
                if name:
                    _add(name)
                    team_names += 1
        if team_names:
            logger.info(f"GP discovery: {team_names} names from team facts")

        partners = 0
        for profile in linkedin_profiles or []:
            headline = (profile.headline or "").lower()
            if profile.name and any(marker in headline for marker in PARTNER_MARKERS):
                _add(profile.name)
                partners += 1
        if partners:
            logger.info(f"GP discovery: {partners} names from LinkedIn partner headlines")

        logger.info(f"GP discovery: {len(names)} unique candidates")
        return names
