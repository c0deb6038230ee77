"""
Services package for the VC Dossier Builder.
Wrappers around the external systems the pipeline talks to.
"""

from .llm import LLMService, LLMResponseError
from .search import SearchService
from .browser import BrowserScraper
from .cleaner import HTMLCleaner
from .linkedin import get_linkedin_scraper
from .sebi import SebiRegistryScraper

__all__ = [
    'LLMService',            # OpenAI generation and extraction
    'LLMResponseError',      # Unparsable model output
    'SearchService',         # SERP API web search
    'BrowserScraper',        # Headless page rendering
    'HTMLCleaner',           # HTML to text and links
    'get_linkedin_scraper',  # LinkedIn provider factory
    'SebiRegistryScraper',   # SEBI AIF registry listing
]
