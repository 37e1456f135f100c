"""SerpAPI search tool for competitor, trend and pain point research"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar
from urllib.parse import urlparse

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import Settings, get_settings
from src.errors import ConfigurationError, RateLimitError, SearchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SERPAPI_URL = "https://serpapi.com/search.json"
RATE_LIMIT_MESSAGE = "SerpAPI rate limit exceeded. Please wait before retrying."

MAX_COMPETITORS = 5
MAX_RELATED_QUERIES = 10
MAX_RISING_TOPICS = 10
MAX_PAIN_POINTS = 10
PAIN_POINT_ATTEMPTS = 2
DEDUP_KEY_LENGTH = 50


@dataclass
class CompetitorResult:
    """A competitor found in organic search results"""
    name: str
    url: str
    title: str
    description: str
    position: int


@dataclass
class TrendData:
    """Related searches and rising topics for a keyword"""
    keyword: str
    related_queries: list[str] = field(default_factory=list)
    rising_topics: list[str] = field(default_factory=list)
    search_volume: str | None = None


@dataclass
class PainPoint:
    """A customer complaint surfaced from forums or the open web"""
    text: str
    source: str
    url: str
    mentions: int = 1


def extract_domain(url: str) -> str:
    """Host of a URL without its www. prefix"""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return url
    if not hostname:
        return url
    return hostname.removeprefix("www.")


def pain_point_key(text: str) -> str:
    """Normalized prefix used to spot near-duplicate pain points"""
    normalized = re.sub(r"[^a-z0-9\s]", "", text.lower()).strip()
    return normalized[:DEDUP_KEY_LENGTH]


def deduplicate_pain_points(pain_points: list[PainPoint]) -> list[PainPoint]:
    """Drop pain points whose normalized prefix was already seen (first wins)"""
    seen: set[str] = set()
    unique: list[PainPoint] = []
    for point in pain_points:
        key = pain_point_key(point.text)
        if key not in seen:
            seen.add(key)
            unique.append(point)
    return unique


def _is_rate_limited(error: BaseException) -> bool:
    message = str(error).lower()
    return "rate limit" in message or "429" in message


class SearchTool:
    """SerpAPI wrapper for market research"""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    async def _search(self, query: str, num: int, location: str | None = None) -> dict:
        """Run one Google search through SerpAPI and return the raw payload"""
        if not self.settings.serp_api_key:
            raise ConfigurationError("SERP_API_KEY environment variable is not set")

        params: dict[str, Any] = {
            "engine": "google",
            "q": query,
            "api_key": self.settings.serp_api_key,
            "num": num,
        }
        if location and location != "online":
            params["location"] = location

        async with httpx.AsyncClient(
            timeout=self.settings.http_timeout,
            transport=self._transport,
        ) as client:
            response = await client.get(SERPAPI_URL, params=params)
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict):
            raise SearchError("Invalid response from SerpAPI")
        if data.get("error"):
            raise SearchError(data["error"])
        return data

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "SerpAPI attempt %d failed (%s), retrying in %.2fs",
            retry_state.attempt_number,
            error,
            wait,
        )

    async def _with_retries(
        self,
        fn: Callable[[], Awaitable[T]],
        max_attempts: int | None = None,
    ) -> T:
        """Await fn() with exponential backoff (base delay from settings)"""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max_attempts or self.settings.search_max_attempts),
            retry=retry_if_not_exception_type(ConfigurationError),
            wait=wait_exponential(multiplier=self.settings.search_retry_delay, min=0),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                return await fn()

    @staticmethod
    def _surface(error: Exception, operation: str) -> SearchError:
        """Classify a final failure as a rate limit or a generic search error"""
        if _is_rate_limited(error):
            return RateLimitError(RATE_LIMIT_MESSAGE)
        return SearchError(f"Failed to {operation}: {error}")

    async def search_competitors(
        self,
        industry: str,
        location: str = "USA",
    ) -> list[CompetitorResult]:
        """
        Search for the top competitors in an industry and location.

        Returns:
            Up to 5 competitors in result-position order
        """
        logger.info("Searching competitors for %s in %s", industry, location)
        query = f"best {industry} in {location}"

        try:
            data = await self._with_retries(
                lambda: self._search(query, num=10, location=location)
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error("Competitor search failed: %s", e)
            raise self._surface(e, "search competitors") from e

        competitors: list[CompetitorResult] = []
        for i, result in enumerate(data.get("organic_results", [])[:MAX_COMPETITORS]):
            link = result.get("link")
            title = result.get("title")
            if link and title:
                competitors.append(CompetitorResult(
                    name=extract_domain(link),
                    url=link,
                    title=title,
                    description=result.get("snippet") or result.get("description") or "",
                    position=i + 1,
                ))

        logger.info("Found %d competitors for %s", len(competitors), industry)
        return competitors

    async def get_market_trends(self, keyword: str) -> TrendData:
        """Related queries and rising topics for a keyword"""
        logger.info("Getting market trends for %s", keyword)

        try:
            related_data = await self._with_retries(lambda: self._search(keyword, num=5))
            trend_data = await self._with_retries(
                lambda: self._search(f"{keyword} trends 2025", num=5)
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error("Trend analysis failed: %s", e)
            raise self._surface(e, "get market trends") from e

        related_queries = [
            item.get("query") or item.get("text")
            for item in related_data.get("related_searches", [])
        ]
        related_queries = [q for q in related_queries if q][:MAX_RELATED_QUERIES]

        topics: list[str] = []
        for result in trend_data.get("organic_results", [])[:5]:
            title = result.get("title")
            if title:
                words = [w for w in title.lower().split() if len(w) > 4]
                topics.extend(words[:3])

        trends = TrendData(
            keyword=keyword,
            related_queries=related_queries,
            rising_topics=list(dict.fromkeys(topics))[:MAX_RISING_TOPICS],
        )
        logger.info(
            "Found %d related queries and %d rising topics",
            len(trends.related_queries),
            len(trends.rising_topics),
        )
        return trends

    async def search_pain_points(self, product: str) -> list[PainPoint]:
        """
        Mine complaints about a product from Reddit and the open web.

        Each sub-query gets fewer retries than the other searches to limit
        rate-limit pressure; a failing sub-query is skipped.
        """
        logger.info("Searching pain points for %s", product)
        queries = [
            f"{product} problems site:reddit.com",
            f"{product} issues site:reddit.com",
            f"{product} complaints",
        ]

        pain_points: list[PainPoint] = []
        try:
            for i, query in enumerate(queries):
                if i > 0:
                    await asyncio.sleep(self.settings.pain_point_query_pause)
                try:
                    data = await self._with_retries(
                        lambda q=query: self._search(q, num=5),
                        max_attempts=PAIN_POINT_ATTEMPTS,
                    )
                except ConfigurationError:
                    raise
                except Exception as e:
                    logger.warning("Pain point query %r failed, continuing: %s", query, e)
                    continue

                source = "Reddit" if "reddit" in query else "Web"
                for result in data.get("organic_results", []):
                    if result.get("snippet") and result.get("link"):
                        pain_points.append(PainPoint(
                            text=result["snippet"],
                            source=source,
                            url=result["link"],
                        ))
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error("Pain point search failed: %s", e)
            raise self._surface(e, "search pain points") from e

        unique = deduplicate_pain_points(pain_points)[:MAX_PAIN_POINTS]
        logger.info("Found %d unique pain points for %s", len(unique), product)
        return unique

    async def conduct_market_research(
        self,
        industry: str,
        product: str,
        location: str = "USA",
    ) -> tuple[list[CompetitorResult], TrendData, list[PainPoint]]:
        """Run all three searches concurrently; any failure fails the whole call"""
        try:
            competitors, trends, pain_points = await asyncio.gather(
                self.search_competitors(industry, location),
                self.get_market_trends(product),
                self.search_pain_points(product),
            )
        except Exception as e:
            logger.error("Market research failed: %s", e)
            raise SearchError(f"Market research failed: {e}") from e

        return competitors, trends, pain_points


# Singleton instance
_search_tool: SearchTool | None = None


def get_search_tool() -> SearchTool:
    """Get the search tool singleton"""
    global _search_tool
    if _search_tool is None:
        _search_tool = SearchTool()
    return _search_tool
