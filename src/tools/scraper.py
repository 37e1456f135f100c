"""Firecrawl scraper tool for brand website analysis"""

import logging
from typing import Any
from urllib.parse import urlparse

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt

from src.config import Settings, get_settings
from src.errors import ConfigurationError, ScrapeError

logger = logging.getLogger(__name__)

# Backoff units in seconds
RATE_LIMIT_BACKOFF = 5.0
BASE_BACKOFF = 1.0


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_rate_limit_error(error: BaseException | None) -> bool:
    if error is None:
        return False
    message = str(error).lower()
    return "rate limit" in message or "429" in message


def scrape_backoff(retry_state: RetryCallState) -> float:
    """
    Seconds to wait before the next scrape attempt.

    Rate-limited attempts wait 5s * attempt; anything else backs off
    exponentially from 1s (1s, 2s, 4s, ...).
    """
    attempt = retry_state.attempt_number
    error = retry_state.outcome.exception() if retry_state.outcome else None
    if is_rate_limit_error(error):
        return RATE_LIMIT_BACKOFF * attempt
    return BASE_BACKOFF * 2 ** (attempt - 1)


def _markdown_of(document: Any) -> str | None:
    """Pull markdown out of a Firecrawl document (object or dict payload)"""
    if document is None:
        return None
    if isinstance(document, dict):
        return document.get("markdown")
    return getattr(document, "markdown", None)


class ScraperTool:
    """Firecrawl wrapper that turns a website into main-content markdown"""

    def __init__(
        self,
        settings: Settings | None = None,
        client: Any | None = None,
        backoff_scale: float = 1.0,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.backoff_scale = backoff_scale

    def _get_client(self) -> Any:
        """Get or create the Firecrawl client"""
        if self._client is None:
            if not self.settings.firecrawl_api_key:
                raise ConfigurationError("FIRECRAWL_API_KEY environment variable is not set")
            from firecrawl import AsyncFirecrawl

            self._client = AsyncFirecrawl(api_key=self.settings.firecrawl_api_key)
            logger.info("Firecrawl client initialized")
        return self._client

    def _wait(self, retry_state: RetryCallState) -> float:
        return scrape_backoff(retry_state) * self.backoff_scale

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        if is_rate_limit_error(error):
            logger.warning("Firecrawl rate limit hit, waiting %.1fs", wait)
        else:
            logger.warning(
                "Scrape attempt %d failed (%s), retrying in %.1fs",
                retry_state.attempt_number,
                error,
                wait,
            )

    async def _scrape_once(self, client: Any, url: str) -> str:
        document = await client.scrape(
            url,
            formats=["markdown"],
            only_main_content=True,
            timeout=self.settings.http_timeout * 1000,
        )
        markdown = _markdown_of(document)
        if not markdown:
            raise ScrapeError("No markdown content returned from Firecrawl")
        return markdown

    async def scrape_website(self, url: str, max_retries: int | None = None) -> str:
        """
        Scrape a website and return its main content as markdown.

        Args:
            url: The URL to scrape
            max_retries: Maximum attempts (default from settings)

        Returns:
            Markdown content of the page

        Raises:
            ScrapeError: The URL is malformed or every attempt failed
        """
        if max_retries is None:
            max_retries = self.settings.scrape_max_retries

        if not is_valid_url(url):
            raise ScrapeError(f"Invalid URL format: {url}")

        client = self._get_client()
        logger.info("Scraping %s", url)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_retries),
                wait=self._wait,
                before_sleep=self._log_retry,
                reraise=True,
            ):
                with attempt:
                    markdown = await self._scrape_once(client, url)
        except Exception as e:
            raise ScrapeError(
                f"Failed to scrape {url} after {max_retries} attempts: {e}"
            ) from e

        logger.info("Scraped %s (%d chars)", url, len(markdown))
        return markdown


# Singleton instance
_scraper_tool: ScraperTool | None = None


def get_scraper_tool() -> ScraperTool:
    """Get the scraper tool singleton"""
    global _scraper_tool
    if _scraper_tool is None:
        _scraper_tool = ScraperTool()
    return _scraper_tool
