"""LangGraph nodes for the research pipeline, with timing and error logging"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine

from src.agents.assembler import assemble_result
from src.agents.brand_analyzer import research_brand
from src.agents.market_researcher import infer_location, run_market_research
from src.cache.store import get_research_cache
from src.errors import ResearchError
from src.graph.state import ResearchResult, ResearchState

logger = logging.getLogger(__name__)

NodeFn = Callable[[ResearchState], Coroutine[Any, Any, dict]]

# Detached cache writes; held here so they are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


def create_node_wrapper(node_fn: NodeFn, node_name: str) -> NodeFn:
    """
    Wrap a node function with timing and error logging.

    The wrapper stamps ``updated_at`` on success. Errors are logged with the
    elapsed time and re-raised; the pipeline never continues past a failed node.
    """

    async def wrapped_node(state: ResearchState) -> dict:
        start_time = time.perf_counter()
        try:
            result = await node_fn(state)
        except Exception:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.exception("Node '%s' failed after %dms", node_name, duration_ms)
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info("Node '%s' completed in %dms", node_name, duration_ms)
        result["updated_at"] = datetime.now(timezone.utc).isoformat()
        return result

    return wrapped_node


async def cache_check(state: ResearchState) -> dict:
    """Return a cached result for the URL unless a refresh was forced"""
    research_input = state["research_input"]
    if state.get("force_refresh"):
        logger.info("Force refresh requested for %s, skipping cache", research_input.url)
        return {"status": "analyzing_brand"}

    cached = await get_research_cache().get(research_input.url)
    if cached is not None:
        logger.info("Returning cached research for %s", research_input.url)
        return {"result": cached, "status": "cache_hit"}

    return {"status": "analyzing_brand"}


async def brand_analysis(state: ResearchState) -> dict:
    """Scrape the brand site and extract brand attributes (fatal on failure)"""
    research_input = state["research_input"]
    try:
        brand = await research_brand(research_input.url, research_input.location)
    except Exception as e:
        raise ResearchError(f"Failed to analyze website: {e}") from e

    return {"brand": brand, "status": "researching_market"}


async def market_fan_out(state: ResearchState) -> dict:
    """Competitor, trend and pain point searches, each allowed to fail alone"""
    research_input = state["research_input"]
    location = research_input.location or infer_location(research_input.url)

    competitors, trends, pain_points = await run_market_research(
        research_input.product_type, location
    )
    return {
        "location": location,
        "competitors": competitors,
        "trends": trends,
        "pain_points": pain_points,
        "status": "assembling",
    }


async def assembly(state: ResearchState) -> dict:
    research_input = state["research_input"]
    result = assemble_result(
        url=research_input.url,
        objective=research_input.objective,
        location=state["location"],
        brand=state["brand"],
        competitors=state["competitors"],
        trends=state["trends"],
        pain_points=state["pain_points"],
    )
    logger.info("Research quality score: %d/100", result.quality_score)
    return {"result": result, "status": "caching"}


async def _write_cache(url: str, result: ResearchResult) -> None:
    try:
        await get_research_cache().set(url, result)
    except Exception as e:
        logger.error("Failed to cache research for %s: %s", url, e)


async def cache_write(state: ResearchState) -> dict:
    """Persist the result in the background; the caller does not wait for it"""
    task = asyncio.create_task(
        _write_cache(state["research_input"].url, state["result"])
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return {"status": "completed"}


async def drain_cache_writes() -> None:
    """Wait for every pending background cache write to finish"""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
