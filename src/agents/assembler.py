"""Result assembly - merges brand and market signals into one ResearchResult"""

from src.agents.audience_profiler import build_audience_profile
from src.agents.competitor_analyst import build_competitor_insight
from src.agents.market_researcher import build_market_intelligence
from src.graph.state import BrandResearch, Objective, ResearchResult, ResearchSource
from src.tools.search import CompetitorResult, PainPoint, TrendData

SEARCH_SOURCE_URL = "https://google.com"

# Brand data is mandatory; each market signal adds its weight when present
BRAND_WEIGHT = 40
COMPETITOR_WEIGHT = 25
TREND_WEIGHT = 20
PAIN_POINT_WEIGHT = 15


def calculate_quality_score(
    has_brand: bool,
    has_competitors: bool,
    has_trends: bool,
    has_pain_points: bool,
) -> int:
    score = 0
    if has_brand:
        score += BRAND_WEIGHT
    if has_competitors:
        score += COMPETITOR_WEIGHT
    if has_trends:
        score += TREND_WEIGHT
    if has_pain_points:
        score += PAIN_POINT_WEIGHT
    return min(score, 100)


def assemble_result(
    url: str,
    objective: Objective,
    location: str,
    brand: BrandResearch,
    competitors: list[CompetitorResult],
    trends: TrendData,
    pain_points: list[PainPoint],
) -> ResearchResult:
    """Build the final research result with its quality score and sources"""
    pain_point_texts = [point.text for point in pain_points]

    has_competitors = bool(competitors)
    has_trends = bool(trends.related_queries)
    has_pain_points = bool(pain_points)

    sources = [ResearchSource(type="web-scrape", url=url, reliability="high")]
    if has_competitors or has_trends or has_pain_points:
        sources.append(
            ResearchSource(
                type="search-results", url=SEARCH_SOURCE_URL, reliability="high"
            )
        )

    return ResearchResult(
        brand=brand,
        competitors=build_competitor_insight(brand, competitors),
        market=build_market_intelligence(trends, pain_points),
        audience=build_audience_profile(brand, objective, location, pain_point_texts),
        cached=False,
        quality_score=calculate_quality_score(
            True, has_competitors, has_trends, has_pain_points
        ),
        sources=sources,
    )
