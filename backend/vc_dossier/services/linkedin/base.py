"""
LinkedIn Scraper Base Module

Common interface for the LinkedIn scraping providers plus the
provider-neutral formatting and aggregation helpers.
"""

from collections import Counter
from typing import Dict, Any, List

from ...schemas import LinkedInProfile, LinkedInCompany, ScrapeOutcome


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First truthy value among `keys`"""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return default


class LinkedInScraper:
    """
    Base class for LinkedIn scraping providers.

    Subclasses implement the two scrape calls; they must report failures
    through ScrapeOutcome(success=False) instead of raising.
    """

    provider = "base"

    def is_configured(self) -> bool:
        raise NotImplementedError

    async def scrape_profiles(self, urls: List[str]) -> ScrapeOutcome:
        raise NotImplementedError

    async def scrape_companies(self, urls: List[str]) -> ScrapeOutcome:
        raise NotImplementedError

    def format_profiles(self, profiles: List[Dict[str, Any]]) -> List[LinkedInProfile]:
        """Map raw provider payloads onto LinkedInProfile"""
        formatted = []
        for profile in profiles:
            formatted.append(LinkedInProfile(
                url=_first(profile, "url", "input_url", "linkedInUrl"),
                name=_first(profile, "name", "fullName"),
                headline=profile.get("headline"),
                location=_first(profile, "location", "city"),
                about=_first(profile, "about", "summary"),
                experience=profile.get("experience") or [],
                education=profile.get("education") or [],
                skills=profile.get("skills") or [],
                connections=_first(profile, "connections", "connectionsCount"),
                followers=_first(profile, "followers", "followersCount"),
                profile_picture=_first(profile, "avatar", "profilePicture", "photoUrl"),
                contact_info={
                    "email": profile.get("email"),
                    "phone": profile.get("phone"),
                    "twitter": profile.get("twitter"),
                    "websites": _first(profile, "websites", "bio_links", default=[]),
                },
                raw=profile,
            ))
        return formatted

    def format_companies(self, companies: List[Dict[str, Any]]) -> List[LinkedInCompany]:
        """Map raw provider payloads onto LinkedInCompany"""
        return [
            LinkedInCompany(
                url=_first(company, "url", "linkedin_url"),
                name=_first(company, "name", "company_name"),
                description=_first(company, "description", "about"),
                website=_first(company, "website", "company_website"),
                industry=_first(company, "industry", "industries"),
                company_size=_first(company, "company_size", "employees_count"),
                headquarters=_first(company, "headquarters", "location"),
                founded=_first(company, "founded", "founded_year"),
                specialties=company.get("specialties"),
                followers=_first(company, "followers", "followers_count"),
                logo=_first(company, "logo", "profile_photo"),
                raw=company,
            )
            for company in companies
        ]

    @staticmethod
    def extract_insights(profiles: List[LinkedInProfile]) -> Dict[str, Any]:
        """
        Aggregate formatted profiles into companies, schools, locations,
        the 20 most common skills and any contact details.
        """
        companies: List[str] = []
        schools: List[str] = []
        locations: List[str] = []
        skills: Counter = Counter()
        emails: List[str] = []
        websites: List[str] = []

        def _add(target: List[str], value: Any) -> None:
            if value and value not in target:
                target.append(value)

        for profile in profiles:
            _add(locations, profile.location)

            for exp in profile.experience:
                if isinstance(exp, dict):
                    _add(companies, exp.get("company") or exp.get("companyName"))

            for edu in profile.education:
                if isinstance(edu, dict):
                    _add(schools, edu.get("school") or edu.get("schoolName") or edu.get("title"))

            for skill in profile.skills:
                skill_name = skill if isinstance(skill, str) else (skill or {}).get("name")
                if skill_name:
                    skills[skill_name] += 1

            if profile.contact_info.get("email"):
                emails.append(profile.contact_info["email"])
            websites.extend(profile.contact_info.get("websites") or [])

        return {
            "total_profiles": len(profiles),
            "companies": companies,
            "schools": schools,
            "locations": locations,
            "top_skills": [
                {"skill": skill, "count": count}
                for skill, count in skills.most_common(20)
            ],
            "emails": emails,
            "websites": websites,
        }
