"""Brand Analyzer Agent - Scrapes a brand website and extracts its positioning"""

import logging

from pydantic import ValidationError

from src.errors import BrandExtractionError, ResponseParseError
from src.graph.state import BrandResearch
from src.llm.claude_client import get_claude_client
from src.llm.parsing import extract_json_object
from src.tools.scraper import get_scraper_tool

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 8000

LANGUAGE_MARKERS: list[tuple[str, tuple[str, ...]]] = [
    ("Spanish", (
        "argentina", "spain", "españa", "mexico", "colombia", "chile", "peru",
        "venezuela", "ecuador", "guatemala", "cuba", "bolivia", "dominican",
        "honduras", "paraguay", "salvador", "nicaragua", "costa rica",
        "panama", "uruguay",
    )),
    ("Portuguese", ("brazil", "brasil", "portugal")),
    ("French", ("france", "canada", "belgium")),
    ("German", ("germany", "austria", "switzerland")),
]

EXTRACTION_PROMPT = """Analyze this website content and extract brand information. Return ONLY a JSON object with this exact structure (no markdown, no code blocks):{language_instruction}

{{
  "name": "brand name",
  "tone": "professional|casual|friendly|urgent|humorous|authoritative|playful",
  "valueProposition": "core value proposition in one sentence",
  "differentiators": ["key differentiator 1", "key differentiator 2", "key differentiator 3"],
  "productCategories": ["category 1", "category 2"],
  "targetMarkets": ["market segment 1", "market segment 2"]
}}

Website content:
{content}

Extract the brand's:
1. Name (exact brand name)
2. Tone (choose the most appropriate from the list)
3. Value proposition (what makes them unique, in one clear sentence)
4. Differentiators (3-5 key points that set them apart)
5. Product categories (main products/services they offer)
6. Target markets (who they serve, be specific)

Analyze the language, messaging, and content to determine these accurately."""


def language_from_location(location: str | None) -> str:
    """Pick the reply language for a market location (English by default)"""
    if not location:
        return "English"

    loc = location.lower()
    for language, markers in LANGUAGE_MARKERS:
        if any(marker in loc for marker in markers):
            return language
    return "English"


def build_extraction_prompt(markdown: str, language: str) -> str:
    language_instruction = ""
    if language != "English":
        language_instruction = (
            f"\n\nIMPORTANT: Respond in {language}. All text fields (valueProposition, "
            f"differentiators, productCategories, targetMarkets) must be in {language}."
        )
    return EXTRACTION_PROMPT.format(
        language_instruction=language_instruction,
        content=markdown[:MAX_CONTENT_CHARS],
    )


async def extract_brand_info(markdown: str, location: str | None = None) -> BrandResearch:
    """
    Ask the language model for the brand's six core attributes.

    Raises:
        BrandExtractionError: Empty input, unparseable reply or missing
            name/valueProposition
    """
    if not markdown or not markdown.strip():
        raise BrandExtractionError("Markdown content is empty")

    language = language_from_location(location)
    logger.info(
        "Extracting brand info from %d chars (language: %s)", len(markdown), language
    )

    llm = get_claude_client()
    reply = await llm.generate(prompt=build_extraction_prompt(markdown, language))
    if not reply:
        raise BrandExtractionError("Failed to extract brand information: empty model response")

    try:
        data = extract_json_object(reply)
    except ResponseParseError as e:
        logger.error("Unparseable brand extraction reply: %s", reply[:200])
        raise BrandExtractionError(f"Failed to extract brand information: {e}") from e

    if not data.get("name") or not data.get("valueProposition"):
        raise BrandExtractionError(
            "Failed to extract brand information: incomplete brand information extracted"
        )

    try:
        brand = BrandResearch.model_validate(data)
    except ValidationError as e:
        raise BrandExtractionError(f"Failed to extract brand information: {e}") from e

    logger.info("Extracted brand info for %s", brand.name)
    return brand


async def research_brand(url: str, location: str | None = None) -> BrandResearch:
    """
    Brand analysis node body - scrape the site, then extract brand attributes.

    Any failure propagates; there is no brand result without both steps.
    """
    logger.info("Starting brand research for %s", url)
    markdown = await get_scraper_tool().scrape_website(url)
    return await extract_brand_info(markdown, location)
