"""Configuration management using Pydantic Settings"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


# Keys the research pipeline cannot run without (scraping, search, LLM)
REQUIRED_RESEARCH_KEYS = ("firecrawl_api_key", "serp_api_key", "anthropic_api_key")


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Research providers
    firecrawl_api_key: str = ""
    serp_api_key: str = ""
    anthropic_api_key: str = ""

    # Ad generation providers (claude reuses anthropic_api_key)
    openai_api_key: str = ""
    google_api_key: str = ""

    # Models
    claude_model: str = "claude-sonnet-4-5"
    openai_model: str = "gpt-4o"
    gemini_model: str = "gemini-2.0-flash"

    # Cache (Upstash Redis REST) - leave empty to run uncached
    upstash_redis_rest_url: str = ""
    upstash_redis_rest_token: str = ""
    cache_ttl_seconds: int = 7 * 24 * 60 * 60

    # HTTP
    http_timeout: int = 30

    # Scraper Settings
    scrape_max_retries: int = 3

    # Search Settings
    search_max_attempts: int = 3
    search_retry_delay: float = 1.0
    pain_point_query_pause: float = 0.5

    # Logging
    log_level: str = "INFO"

    @property
    def cache_configured(self) -> bool:
        return bool(self.upstash_redis_rest_url and self.upstash_redis_rest_token)

    def missing_research_keys(self) -> list[str]:
        """Env var names of the research credentials that are not set"""
        return [key.upper() for key in REQUIRED_RESEARCH_KEYS if not getattr(self, key)]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
