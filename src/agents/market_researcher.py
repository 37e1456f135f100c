"""Market Researcher Agent - Competitor, trend and pain point fan-out"""

import asyncio
import logging
from urllib.parse import urlparse

from src.graph.state import MarketIntelligence, TrendTopic
from src.tools.search import (
    CompetitorResult,
    PainPoint,
    TrendData,
    get_search_tool,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "USA"

TLD_LOCATIONS: list[tuple[str, str]] = [
    (".uk", "United Kingdom"),
    (".ca", "Canada"),
    (".au", "Australia"),
]


def infer_location(url: str) -> str:
    """Guess the target market from the site's country-code TLD"""
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return DEFAULT_LOCATION

    for suffix, location in TLD_LOCATIONS:
        if hostname.endswith(suffix):
            return location
    return DEFAULT_LOCATION


async def run_market_research(
    product_type: str,
    location: str,
) -> tuple[list[CompetitorResult], TrendData, list[PainPoint]]:
    """
    Run the three market searches concurrently.

    Every branch is independent: a failure is logged and replaced with an
    empty default so the other branches still contribute.
    """
    search_tool = get_search_tool()
    competitors, trends, pain_points = await asyncio.gather(
        search_tool.search_competitors(product_type, location),
        search_tool.get_market_trends(product_type),
        search_tool.search_pain_points(product_type),
        return_exceptions=True,
    )

    if isinstance(competitors, BaseException):
        logger.warning("Competitor search failed: %s", competitors)
        competitors = []
    if isinstance(trends, BaseException):
        logger.warning("Trend search failed: %s", trends)
        trends = TrendData(keyword=product_type)
    if isinstance(pain_points, BaseException):
        logger.warning("Pain point search failed: %s", pain_points)
        pain_points = []

    logger.info(
        "Market research for %r in %s: %d competitors, %d related queries, %d pain points",
        product_type,
        location,
        len(competitors),
        len(trends.related_queries),
        len(pain_points),
    )
    return competitors, trends, pain_points


def build_market_intelligence(
    trends: TrendData,
    pain_points: list[PainPoint],
) -> MarketIntelligence:
    return MarketIntelligence(
        trends=[TrendTopic(topic=topic) for topic in trends.rising_topics],
        pain_points=[point.text for point in pain_points],
        popular_searches=list(trends.related_queries),
        seasonal_patterns=[],
        emerging_opportunities=trends.rising_topics[:5],
    )
