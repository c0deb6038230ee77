"""
Configuration Module

This module provides configuration settings for the application.
It loads environment variables from a .env file and provides default values.

"""

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from typing import Optional

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables with defaults.
    Settings are validated using Pydantic's BaseSettings.
    """

    # Core settings
    PROJECT_NAME: str = "VC Dossier Builder"
    VERSION: str = "1.0.0"

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # OpenAI configuration
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.2

    # Retry policy for generation calls (attempts after the first one)
    LLM_MAX_RETRIES: int = 5
    LLM_INITIAL_BACKOFF: float = 2.0

    # SERP API configuration
    SERPAPI_KEY: str = ""
    SEARCH_COUNTRY: str = "in"

    # LinkedIn providers: "brightdata" or "apify"
    LINKEDIN_PROVIDER: str = os.getenv("LINKEDIN_PROVIDER", "brightdata")
    APIFY_API_TOKEN: str = ""
    APIFY_ACTOR_ID: str = "supreme_coder/linkedin-profile-scraper"
    BRIGHT_DATA_API_KEY: str = ""
    BRIGHT_DATA_PROFILE_DATASET_ID: str = "gd_l1viktl72bvl7bjuj0"
    BRIGHT_DATA_COMPANY_DATASET_ID: str = "gd_l1vikfnt1wgvvqz95w"
    BRIGHT_DATA_POLL_INTERVAL: int = 10
    BRIGHT_DATA_TIMEOUT: int = 1800

    # Headless browser
    BROWSER_HEADLESS: bool = True
    NAVIGATION_TIMEOUT_MS: int = 60000
    FALLBACK_TIMEOUT_MS: int = 30000
    RENDER_WAIT_MS: int = 2000
    USER_AGENT: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Pipeline pacing (seconds)
    PAGE_DELAY: float = 1.0
    FIRM_DELAY: float = 2.0
    LINKEDIN_BATCH_DELAY: float = 2.0
    GP_QUERY_DELAY: float = 0.5
    GP_SEARCH_DELAY: float = 2.0

    # Pipeline thresholds
    LINKEDIN_BATCH_SIZE: int = 50
    LINKEDIN_MIN_IMPORTANCE: int = 60
    ENHANCE_GP_BACKGROUNDS: bool = True

    # Logging configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Get project root directory
    PROJECT_ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../"))

    # Set all data directories relative to the project root
    DATA_DIR: str = os.getenv("DATA_DIR", os.path.join(PROJECT_ROOT, "data"))
    FIRMS_DIR: str = os.path.join(DATA_DIR, "firms")
    EXPORTS_DIR: str = os.path.join(DATA_DIR, "exports")
    LOGS_DIR: str = os.path.join(DATA_DIR, "logs")
    INPUT_FILE: str = os.path.join(PROJECT_ROOT, "inputs.json")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Create all data directories
        for dir_path in [self.DATA_DIR, self.FIRMS_DIR, self.EXPORTS_DIR, self.LOGS_DIR]:
            os.makedirs(dir_path, exist_ok=True)

    model_config = SettingsConfigDict(
        # Explicitly point to the .env file in the project root
        env_file=os.path.join(os.path.dirname(__file__), "../../../.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Allow extra fields from .env file
    )


# Create settings instance
settings = Settings()


def mask_secret(value: Optional[str]) -> str:
    """Render an API key for log output without leaking it"""
    if not value:
        return "<unset>"
    return f"{value[:4]}...{value[-2:]}" if len(value) > 8 else "****"
