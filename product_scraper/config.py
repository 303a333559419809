"""Application configuration using Pydantic settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App Settings
    debug: bool = False
    log_level: str = "INFO"
    app_host: str = "0.0.0.0"
    app_port: int = 8001

    # ==========================================================================
    # Scraping Provider Settings
    # ==========================================================================
    scraping_provider: Optional[str] = None  # "scrapingbee" or "scraperapi"
    scraping_api_key: Optional[str] = None
    provider_render_js: bool = True  # Ask the provider to render JavaScript
    provider_timeout_ms: int = 10000
    amazon_api_timeout_ms: int = 30000  # Structured product endpoint is slower

    # ==========================================================================
    # Direct / Proxy Fetch Settings
    # ==========================================================================
    scraper_proxy: Optional[str] = None  # http(s)://user:pass@host:port
    scraper_max_attempts: int = 3
    scraper_timeout_ms: int = 10000  # Per-attempt timeout

    # Caller-level budget for a whole scrape (all tiers plus extraction)
    scrape_timeout_seconds: float = 60.0

    # ==========================================================================
    # Connection Pool Settings
    # ==========================================================================
    http_max_connections: int = 100
    http_max_keepalive: int = 20

    # Diagnostics
    body_snippet_chars: int = 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def scraper_timeout_seconds(self) -> float:
        return self.scraper_timeout_ms / 1000

    @property
    def provider_timeout_seconds(self) -> float:
        return self.provider_timeout_ms / 1000

    @property
    def amazon_api_timeout_seconds(self) -> float:
        return self.amazon_api_timeout_ms / 1000


settings = Settings()
