"""Competitor Analyst Agent - Derives competitive positioning from search results"""

from src.graph.state import BrandResearch, CompetitorInsight, CompetitorProfile
from src.tools.search import CompetitorResult

STRENGTH_KEYWORDS = ("best", "top", "leading", "popular", "trusted", "award", "certified")

# (keywords, canonical message) pairs, checked in order
MESSAGE_PATTERNS: list[tuple[tuple[str, ...], str]] = [
    (("quality",), "Focus on quality"),
    (("affordable", "price"), "Competitive pricing"),
    (("fast", "quick"), "Speed and efficiency"),
    (("service",), "Customer service focus"),
    (("expert",), "Expertise and experience"),
]

# Fewer competitors than this reads as an open market
CROWDED_MARKET_SIZE = 5


def extract_strengths(description: str) -> list[str]:
    desc = description.lower()
    strengths = [
        f"Recognized as {keyword} in market"
        for keyword in STRENGTH_KEYWORDS
        if keyword in desc
    ]
    return strengths[:3]


def extract_common_messages(competitors: list[CompetitorResult]) -> list[str]:
    """Messaging themes competitors already lean on (saturated angles)"""
    messages: dict[str, None] = {}
    for comp in competitors:
        desc = comp.description.lower()
        for keywords, message in MESSAGE_PATTERNS:
            if any(keyword in desc for keyword in keywords):
                messages[message] = None
    return list(messages)[:5]


def identify_opportunities(
    brand: BrandResearch,
    competitors: list[CompetitorResult],
) -> list[str]:
    opportunities: list[str] = []
    if brand.differentiators:
        opportunities.append(f"Emphasize unique {brand.differentiators[0]}")
    if len(competitors) < CROWDED_MARKET_SIZE:
        opportunities.append("Market has room for growth and new entrants")
    opportunities.append(f"Leverage {brand.tone} tone to stand out")
    return opportunities[:5]


def suggest_unique_angles(brand: BrandResearch) -> list[str]:
    angles = [f'Focus on "{brand.value_proposition}"']
    if len(brand.differentiators) > 1:
        angles.append(
            f"Combine {brand.differentiators[0]} with {brand.differentiators[1]}"
        )
    target = brand.target_markets[0] if brand.target_markets else "market segment"
    angles.append(f"Target underserved {target}")
    return angles[:5]


def build_competitor_insight(
    brand: BrandResearch,
    competitors: list[CompetitorResult],
) -> CompetitorInsight:
    """Competitor node output: profiles plus gaps the brand can exploit"""
    return CompetitorInsight(
        competitors=[
            CompetitorProfile(
                name=comp.name,
                url=comp.url,
                strengths=extract_strengths(comp.description),
                weaknesses=[],
            )
            for comp in competitors
        ],
        common_messages=extract_common_messages(competitors),
        opportunities=identify_opportunities(brand, competitors),
        pricing_strategies=[],
        unique_angles=suggest_unique_angles(brand),
    )
