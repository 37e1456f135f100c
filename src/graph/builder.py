"""LangGraph state machine builder"""

from langgraph.graph import END, START, StateGraph

from src.graph.edges import route_after_cache_check
from src.graph.nodes import (
    assembly,
    brand_analysis,
    cache_check,
    cache_write,
    create_node_wrapper,
    market_fan_out,
)
from src.graph.state import ResearchState


def build_graph() -> StateGraph:
    """
    Build the research pipeline state machine.

    Flow:

    START → cache_check → [cached?] ─── (hit) ──→ END
                              │
                            (miss)
                              ▼
                        brand_analysis
                              │
                              ▼
                        market_fan_out
                              │
                              ▼
                           assembly
                              │
                              ▼
                         cache_write → END
    """
    graph = StateGraph(ResearchState)

    graph.add_node("cache_check", create_node_wrapper(cache_check, "cache_check"))
    graph.add_node(
        "brand_analysis", create_node_wrapper(brand_analysis, "brand_analysis")
    )
    graph.add_node(
        "market_fan_out", create_node_wrapper(market_fan_out, "market_fan_out")
    )
    graph.add_node("assembly", create_node_wrapper(assembly, "assembly"))
    graph.add_node("cache_write", create_node_wrapper(cache_write, "cache_write"))

    graph.add_edge(START, "cache_check")

    graph.add_conditional_edges(
        "cache_check",
        route_after_cache_check,
        {
            "hit": END,
            "miss": "brand_analysis",
        },
    )

    graph.add_edge("brand_analysis", "market_fan_out")
    graph.add_edge("market_fan_out", "assembly")
    graph.add_edge("assembly", "cache_write")
    graph.add_edge("cache_write", END)

    return graph


def compile_graph():
    """Compile the graph for execution"""
    return build_graph().compile()


# Lazy-loaded compiled graph
_compiled_graph = None


def get_compiled_graph():
    """Get the compiled graph (singleton)"""
    global _compiled_graph
    if _compiled_graph is None:
        _compiled_graph = compile_graph()
    return _compiled_graph
