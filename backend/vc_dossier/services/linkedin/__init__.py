"""
LinkedIn scraping providers.

The provider is chosen with LINKEDIN_PROVIDER ("brightdata" or "apify").
"""

from typing import Optional

from .base import LinkedInScraper
from .apify import ApifyLinkedInScraper
from .brightdata import BrightDataLinkedInScraper
from ...utils.config import settings

PROVIDERS = {
    "apify": ApifyLinkedInScraper,
    "brightdata": BrightDataLinkedInScraper,
}


def get_linkedin_scraper(provider: Optional[str] = None) -> LinkedInScraper:
    """Instantiate the configured LinkedIn provider"""
    name = (provider or settings.LINKEDIN_PROVIDER).lower()
    if name not in PROVIDERS:
        raise ValueError(f"Unknown LinkedIn provider '{name}'. Choose one of: {', '.join(PROVIDERS)}")
    return PROVIDERS[name]()


__all__ = [
    'LinkedInScraper',
    'ApifyLinkedInScraper',
    'BrightDataLinkedInScraper',
    'get_linkedin_scraper',
]
