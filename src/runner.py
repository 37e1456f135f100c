"""Request handlers for running research and generating ad copy"""

import logging
import time

from pydantic import Field, ValidationError, field_validator

from src.cache.store import get_research_cache
from src.config import get_settings
from src.errors import ConfigurationError
from src.graph.builder import get_compiled_graph
from src.graph.state import (
    AdContent,
    AdProvider,
    BrandInfo,
    CamelModel,
    Objective,
    ResearchInput,
    ResearchResult,
    create_initial_state,
)
from src.llm.providers import generate_ad
from src.prompts.ad_prompts import create_ad_prompt
from src.tools.scraper import is_valid_url

logger = logging.getLogger(__name__)


# ============================================================================
# Request / response models
# ============================================================================

class ResearchRequest(CamelModel):
    website_url: str
    product_type: str = Field(min_length=2)
    campaign_goal: Objective
    location: str = "USA"
    force_refresh: bool = False

    @field_validator("website_url")
    @classmethod
    def validate_website_url(cls, v: str) -> str:
        if not is_valid_url(v):
            raise ValueError("Invalid website URL format")
        return v


class FieldError(CamelModel):
    field: str
    message: str


class ResearchResponse(CamelModel):
    success: bool
    data: ResearchResult | None = None
    error: str | None = None
    details: list[FieldError] | None = None
    duration: int = 0
    status_code: int = Field(default=200, exclude=True)


class GenerateAdRequest(BrandInfo):
    """Brand form fields plus the provider and optional research to build on"""

    provider: AdProvider
    research: ResearchResult | None = None


class GenerateAdResponse(CamelModel):
    success: bool
    data: AdContent | None = None
    error: str | None = None
    details: list[FieldError] | None = None
    provider: str | None = None
    status_code: int = Field(default=200, exclude=True)


def _field_errors(error: ValidationError) -> list[FieldError]:
    return [
        FieldError(
            field=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
        )
        for err in error.errors()
    ]


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


# ============================================================================
# Research
# ============================================================================

async def run_research(
    research_input: ResearchInput,
    force_refresh: bool = False,
) -> ResearchResult:
    """
    Run the research pipeline for one URL.

    Raises:
        ConfigurationError: A required research credential is missing
            (checked before any network call)
        ResearchError: Brand analysis failed
    """
    missing = get_settings().missing_research_keys()
    if missing:
        raise ConfigurationError(f"Missing required API keys: {', '.join(missing)}")

    logger.info(
        "Starting research for %s (%s, force_refresh=%s)",
        research_input.url,
        research_input.objective,
        force_refresh,
    )
    graph = get_compiled_graph()
    final_state = await graph.ainvoke(create_initial_state(research_input, force_refresh))
    return final_state["result"]


def classify_research_error(message: str) -> tuple[str, int]:
    """Map a research failure message to a user-facing error and status code"""
    lowered = message.lower()
    if "rate limit" in lowered:
        return "API rate limit exceeded. Please try again in a few minutes.", 429
    if "timeout" in lowered or "timed out" in lowered:
        return "Research request timed out. Please try again with a simpler query.", 504
    if "Invalid URL" in message or "Failed to scrape" in message:
        return f"Unable to analyze website: {message}", 400
    return f"Research failed: {message}", 500


async def handle_research_request(payload: dict) -> ResearchResponse:
    """
    Research trigger: check credentials, validate the payload, run research.

    Never raises; every failure is reported in the response.
    """
    start_time = time.perf_counter()

    missing = get_settings().missing_research_keys()
    if missing:
        logger.error("Missing environment variables: %s", missing)
        return ResearchResponse(
            success=False,
            error=(
                f"Missing required API keys: {', '.join(missing)}. "
                "Please configure environment variables."
            ),
            duration=_elapsed_ms(start_time),
            status_code=503,
        )

    try:
        request = ResearchRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning("Invalid research request: %s", e)
        return ResearchResponse(
            success=False,
            error="Invalid request data",
            details=_field_errors(e),
            duration=_elapsed_ms(start_time),
            status_code=400,
        )

    # Only an explicit location overrides inference from the URL
    location = request.location if "location" in request.model_fields_set else None
    research_input = ResearchInput(
        url=request.website_url,
        product_type=request.product_type,
        objective=request.campaign_goal,
        location=location,
    )

    try:
        result = await run_research(research_input, request.force_refresh)
    except Exception as e:
        error, status_code = classify_research_error(str(e))
        logger.error("Research failed (%d): %s", status_code, e)
        return ResearchResponse(
            success=False,
            error=error,
            duration=_elapsed_ms(start_time),
            status_code=status_code,
        )

    duration = _elapsed_ms(start_time)
    logger.info(
        "Research completed in %dms (quality score %d/100)",
        duration,
        result.quality_score,
    )
    return ResearchResponse(success=True, data=result, duration=duration)


async def bust_cache(url: str) -> None:
    """Drop the cached research for a URL's host"""
    await get_research_cache().delete(url)


# ============================================================================
# Ad generation
# ============================================================================

async def handle_generate_ad_request(payload: dict) -> GenerateAdResponse:
    """Ad trigger: validate brand fields, build the prompt, call the provider"""
    try:
        request = GenerateAdRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning("Invalid ad request: %s", e)
        return GenerateAdResponse(
            success=False,
            error="Invalid request data",
            details=_field_errors(e),
            status_code=400,
        )

    prompt = create_ad_prompt(request, request.research)

    try:
        ad = await generate_ad(request.provider, prompt)
    except Exception as e:
        logger.error("Ad generation with %s failed: %s", request.provider, e)
        return GenerateAdResponse(
            success=False,
            error=f"Failed to generate ad with {request.provider}",
            provider=request.provider,
            status_code=500,
        )

    return GenerateAdResponse(success=True, data=ad, provider=request.provider)
