"""
Application Configuration
Loads tunables from environment variables with sensible defaults.
CLI flags override these values.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path


class Settings(BaseSettings):
    """Scraper settings loaded from HOTEL_SCRAPER_* environment variables."""

    # Run Configuration
    site: str = "booking"
    default_target: int = 200

    # Fetch Configuration
    fetch_timeout: float = 45.0     # Seconds per page, navigation + wait for listings
    settle_time: float = 2.0        # Seconds to let lazy content load after scrolling
    headless: bool = True
    static: bool = False            # Use the httpx crawler instead of Playwright
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Control Loop Configuration
    page_delay: float = 5.0         # Polite delay between page requests
    max_page_retries: int = 5       # 0 retries forever
    retry_backoff: float = 1.0      # Multiplier applied to the delay per failed attempt
    max_pages: Optional[int] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[Path] = None

    @field_validator("default_target")
    @classmethod
    def _positive_target(cls, value: int) -> int:
        if value < 1:
            raise ValueError("default_target must be >= 1")
        return value

    @field_validator("max_page_retries")
    @classmethod
    def _non_negative_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_page_retries must be >= 0")
        return value

    @field_validator("fetch_timeout", "retry_backoff")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be > 0")
        return value

    @field_validator("page_delay", "settle_time")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @field_validator("max_pages")
    @classmethod
    def _positive_page_limit(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("max_pages must be >= 1")
        return value

    class Config:
        env_prefix = "HOTEL_SCRAPER_"
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if __import__("pathlib").Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


# Global settings instance
settings = Settings()
