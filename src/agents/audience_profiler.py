"""Audience Profiler Agent - Infers demographics and language from brand data

All inference here is table-driven: closed enumerations (tone, objective) map
through fixed lookups, and free-text brand fields are matched against small
fixed vocabularies.
"""

from src.graph.state import (
    AudienceProfile,
    AwarenessLevel,
    Behaviors,
    BrandResearch,
    CommonLanguage,
    Demographics,
    IncomeLevel,
    Objective,
    Tone,
)

DEFAULT_AGE_RANGES = ["25-34", "35-44"]
DEFAULT_OCCUPATIONS = ["General Public"]
PREFERRED_CHANNELS = ["online", "social media"]

AGE_RULES: list[tuple[tuple[str, ...], list[str]]] = [
    (("young", "millennial", "gen z"), ["18-24", "25-34"]),
    (("professional", "business"), ["25-34", "35-44", "45-54"]),
    (("senior", "retiree"), ["55-64", "65+"]),
]

INCOME_RULES: list[tuple[tuple[str, ...], IncomeLevel]] = [
    (("luxury", "premium", "high-end"), "luxury"),
    (("professional", "enterprise"), "premium"),
    (("affordable", "budget"), "budget"),
]

OCCUPATION_RULES: list[tuple[tuple[str, ...], str]] = [
    (("professional",), "Professionals"),
    (("business", "entrepreneur"), "Business Owners"),
    (("developer", "tech"), "Tech Workers"),
    (("marketer",), "Marketing Professionals"),
    (("student",), "Students"),
]

AWARENESS_BY_OBJECTIVE: dict[Objective, AwarenessLevel] = {
    "competitor-analysis": "solution-aware",
    "market-trends": "problem-aware",
    "audience-insights": "product-aware",
    "full-research": "solution-aware",
}

EMOTIONAL_TRIGGERS: dict[Tone, list[str]] = {
    "professional": ["trust", "reliability", "expertise", "results"],
    "casual": ["easy", "simple", "friendly", "relatable"],
    "friendly": ["helpful", "supportive", "caring", "welcoming"],
    "urgent": ["now", "limited", "act fast", "don't miss"],
    "humorous": ["fun", "entertaining", "enjoyable", "lighthearted"],
    "authoritative": ["proven", "expert", "leader", "authority"],
    "playful": ["exciting", "creative", "innovative", "fresh"],
}


def _joined(values: list[str]) -> str:
    return " ".join(values).lower()


def infer_age_ranges(target_markets: list[str]) -> list[str]:
    markets = _joined(target_markets)
    for keywords, ranges in AGE_RULES:
        if any(keyword in markets for keyword in keywords):
            return list(ranges)
    return list(DEFAULT_AGE_RANGES)


def infer_income_level(product_categories: list[str]) -> IncomeLevel:
    categories = _joined(product_categories)
    for keywords, level in INCOME_RULES:
        if any(keyword in categories for keyword in keywords):
            return level
    return "mid-range"


def infer_occupations(target_markets: list[str]) -> list[str]:
    markets = _joined(target_markets)
    occupations = [
        occupation
        for keywords, occupation in OCCUPATION_RULES
        if any(keyword in markets for keyword in keywords)
    ]
    return occupations or list(DEFAULT_OCCUPATIONS)


def infer_awareness_level(objective: Objective) -> AwarenessLevel:
    return AWARENESS_BY_OBJECTIVE.get(objective, "solution-aware")


def extract_keywords(text: str) -> list[str]:
    """Words longer than four characters, first ten, lowercased"""
    return [word for word in text.lower().split() if len(word) > 4][:10]


def extract_emotional_triggers(tone: Tone) -> list[str]:
    return list(EMOTIONAL_TRIGGERS.get(tone, EMOTIONAL_TRIGGERS["professional"]))


def build_audience_profile(
    brand: BrandResearch,
    objective: Objective,
    location: str,
    pain_points: list[str],
) -> AudienceProfile:
    return AudienceProfile(
        demographics=Demographics(
            age_ranges=infer_age_ranges(brand.target_markets),
            locations=[location],
            income_level=infer_income_level(brand.product_categories),
            occupation=infer_occupations(brand.target_markets),
        ),
        awareness_level=infer_awareness_level(objective),
        common_language=CommonLanguage(
            keywords=extract_keywords(brand.value_proposition),
            phrases=brand.differentiators[:5],
            jargon=[],
            emotional_triggers=extract_emotional_triggers(brand.tone),
        ),
        behaviors=Behaviors(
            purchase_drivers=list(brand.differentiators),
            objections=pain_points[:5],
            preferred_channels=list(PREFERRED_CHANNELS),
        ),
    )
