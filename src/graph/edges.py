"""Conditional edge logic for the research state machine"""

from typing import Literal

from src.graph.state import ResearchState


def route_after_cache_check(state: ResearchState) -> Literal["hit", "miss"]:
    """
    Decide whether the pipeline needs to run.

    Returns:
    - "hit": a cached result was loaded, finish immediately
    - "miss": no usable cache entry (or refresh forced), run brand analysis
    """
    if state.get("status") == "cache_hit" and state.get("result") is not None:
        return "hit"
    return "miss"
