"""Research state and Pydantic models for the LangGraph state machine"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import TypedDict

from src.tools.search import CompetitorResult, PainPoint, TrendData


Objective = Literal[
    "competitor-analysis",
    "market-trends",
    "audience-insights",
    "full-research",
]
Tone = Literal[
    "professional",
    "casual",
    "friendly",
    "urgent",
    "humorous",
    "authoritative",
    "playful",
]
AwarenessLevel = Literal[
    "unaware",
    "problem-aware",
    "solution-aware",
    "product-aware",
    "most-aware",
]
IncomeLevel = Literal["budget", "mid-range", "premium", "luxury"]
AdProvider = Literal["claude", "openai", "gemini"]

TONES: tuple[str, ...] = get_args(Tone)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys (cache and API wire format)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Research input and brand analysis
# ============================================================================

class ResearchInput(CamelModel):
    """Parameters for one research run"""

    model_config = ConfigDict(frozen=True)

    url: str
    product_type: str
    objective: Objective
    location: str | None = Field(
        default=None,
        description="Explicit market location; inferred from the URL when absent",
    )


class BrandResearch(CamelModel):
    """Brand attributes extracted from the brand's own website"""

    name: str
    tone: Tone = "professional"
    value_proposition: str
    differentiators: list[str] = Field(default_factory=list)
    product_categories: list[str] = Field(default_factory=list)
    target_markets: list[str] = Field(default_factory=list)

    @field_validator("tone", mode="before")
    @classmethod
    def normalize_tone(cls, v):
        """Map anything outside the known tones to professional"""
        if v is None:
            return "professional"
        v_lower = str(v).lower().strip()
        return v_lower if v_lower in TONES else "professional"

    @field_validator(
        "differentiators", "product_categories", "target_markets", mode="before"
    )
    @classmethod
    def coerce_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


# ============================================================================
# Derived insights
# ============================================================================

class CompetitorProfile(CamelModel):
    """A single competitor found in search results"""

    name: str
    url: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class CompetitorInsight(CamelModel):
    competitors: list[CompetitorProfile] = Field(default_factory=list)
    common_messages: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    pricing_strategies: list[str] = Field(default_factory=list)
    unique_angles: list[str] = Field(default_factory=list)


class TrendTopic(CamelModel):
    topic: str
    volume: Literal["high", "medium", "low"] = "medium"
    momentum: Literal["rising", "stable", "declining"] = "stable"


class SeasonalPattern(CamelModel):
    period: str
    insight: str


class MarketIntelligence(CamelModel):
    trends: list[TrendTopic] = Field(default_factory=list)
    pain_points: list[str] = Field(default_factory=list)
    popular_searches: list[str] = Field(default_factory=list)
    seasonal_patterns: list[SeasonalPattern] = Field(default_factory=list)
    emerging_opportunities: list[str] = Field(default_factory=list)


class Demographics(CamelModel):
    age_ranges: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    income_level: IncomeLevel = "mid-range"
    occupation: list[str] = Field(default_factory=list)


class CommonLanguage(CamelModel):
    keywords: list[str] = Field(default_factory=list)
    phrases: list[str] = Field(default_factory=list)
    jargon: list[str] = Field(default_factory=list)
    emotional_triggers: list[str] = Field(default_factory=list)


class Behaviors(CamelModel):
    purchase_drivers: list[str] = Field(default_factory=list)
    objections: list[str] = Field(default_factory=list)
    preferred_channels: list[str] = Field(default_factory=list)


class AudienceProfile(CamelModel):
    """Audience profile inferred from brand data and the campaign objective"""

    demographics: Demographics
    awareness_level: AwarenessLevel = Field(
        description="Schwartz awareness scale position of the target audience"
    )
    common_language: CommonLanguage
    behaviors: Behaviors


class ResearchSource(CamelModel):
    type: Literal["web-scrape", "search-results", "content-analysis"]
    url: str
    reliability: Literal["high", "medium", "low"]


class ResearchResult(CamelModel):
    """Aggregate output of brand, market and audience research for one URL"""

    brand: BrandResearch
    competitors: CompetitorInsight
    market: MarketIntelligence
    audience: AudienceProfile
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    cached: bool = False
    quality_score: int = Field(ge=0, le=100)
    sources: list[ResearchSource] = Field(default_factory=list)


# ============================================================================
# Ad generation models
# ============================================================================

class BrandInfo(CamelModel):
    """Brand form input for ad generation"""

    name: str = Field(min_length=1)
    product: str = Field(min_length=1)
    target_audience: str = Field(min_length=1)
    tone: Literal["professional", "casual", "friendly", "urgent", "humorous"] = (
        "professional"
    )
    key_benefits: str = Field(min_length=1)
    context: str | None = None


class AdContent(CamelModel):
    """Ad copy returned by a provider"""

    hook: str
    body: str
    cta: str
    reasoning: str | None = None
    research_insight: str | None = None
    competitor_gap: str | None = None


# ============================================================================
# LangGraph State
# ============================================================================

class ResearchState(TypedDict, total=False):
    """
    The shared state for the research state machine.

    Each node writes its own slots; no slot is written by more than one node.
    """

    # Request
    research_input: ResearchInput
    force_refresh: bool

    # Stage outputs
    brand: BrandResearch | None
    location: str
    competitors: list[CompetitorResult]
    trends: TrendData
    pain_points: list[PainPoint]

    # Final output
    result: ResearchResult | None

    # Execution status
    status: Literal[
        "started",
        "cache_hit",
        "analyzing_brand",
        "researching_market",
        "assembling",
        "caching",
        "completed",
    ]

    # Metadata
    created_at: str
    updated_at: str


def create_initial_state(
    research_input: ResearchInput,
    force_refresh: bool = False,
) -> ResearchState:
    """Create the initial state for a research run"""
    now = datetime.now(timezone.utc).isoformat()
    return ResearchState(
        research_input=research_input,
        force_refresh=force_refresh,
        brand=None,
        result=None,
        status="started",
        created_at=now,
        updated_at=now,
    )
