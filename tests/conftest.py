"""Test configuration for pytest"""

import json
import os

import httpx
import pytest

# Ensure we have dummy env vars for tests that might load settings
os.environ.setdefault("FIRECRAWL_API_KEY", "test-firecrawl-key")
os.environ.setdefault("SERP_API_KEY", "test-serp-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
# Tests never talk to a real cache
os.environ["UPSTASH_REDIS_REST_URL"] = ""
os.environ["UPSTASH_REDIS_REST_TOKEN"] = ""

from src.config import Settings, get_settings  # noqa: E402
from src.graph.state import (  # noqa: E402
    AudienceProfile,
    Behaviors,
    BrandResearch,
    CommonLanguage,
    CompetitorInsight,
    Demographics,
    MarketIntelligence,
    ResearchResult,
    ResearchSource,
)

ACME_BRAND_JSON = {
    "name": "Acme",
    "tone": "professional",
    "valueProposition": "Project management software that keeps remote teams aligned",
    "differentiators": ["real-time collaboration", "built-in time tracking"],
    "productCategories": ["project management", "enterprise software"],
    "targetMarkets": ["remote teams", "business professionals"],
}


def make_settings(**overrides) -> Settings:
    """Settings with test credentials and no retry delays"""
    values = {
        "firecrawl_api_key": "test-firecrawl-key",
        "serp_api_key": "test-serp-key",
        "anthropic_api_key": "test-anthropic-key",
        "upstash_redis_rest_url": "https://cache.test",
        "upstash_redis_rest_token": "test-token",
        "search_retry_delay": 0,
        "pain_point_query_pause": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_result(**overrides) -> ResearchResult:
    """A small brand-only research result"""
    values = dict(
        brand=BrandResearch(name="Acme", value_proposition="Ship projects on time"),
        competitors=CompetitorInsight(),
        market=MarketIntelligence(pain_points=["slow onboarding"]),
        audience=AudienceProfile(
            demographics=Demographics(age_ranges=["25-34"], locations=["USA"]),
            awareness_level="solution-aware",
            common_language=CommonLanguage(),
            behaviors=Behaviors(),
        ),
        quality_score=55,
        sources=[ResearchSource(type="web-scrape", url="https://acme.com", reliability="high")],
    )
    values.update(overrides)
    return ResearchResult(**values)


class FakeUpstash:
    """In-memory stand-in for the Upstash Redis REST endpoint"""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.commands: list[list[str]] = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        command = json.loads(request.content)
        self.commands.append(command)
        if self.fail:
            return httpx.Response(500, json={"error": "ERR cache down"})

        name, key = command[0], command[1]
        if name == "GET":
            return httpx.Response(200, json={"result": self.store.get(key)})
        if name == "SET":
            self.store[key] = command[2]
            return httpx.Response(200, json={"result": "OK"})
        if name == "DEL":
            removed = 1 if self.store.pop(key, None) is not None else 0
            return httpx.Response(200, json={"result": removed})
        return httpx.Response(200, json={"error": f"ERR unknown command {name}"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeSerpApi:
    """Canned SerpAPI answers keyed on the shape of the query"""

    def __init__(self, keyword: str = "project management software"):
        self.keyword = keyword
        self.queries: list[str] = []
        self.params: list[dict] = []
        self.failing: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        query = params["q"]
        self.queries.append(query)
        self.params.append(params)

        kind = self._kind(query)
        if kind in self.failing:
            return httpx.Response(500, json={"error": "Internal error"})
        return httpx.Response(200, json=getattr(self, f"_{kind}")(query))

    def _kind(self, query: str) -> str:
        if query.startswith("best "):
            return "competitors"
        if query.endswith("trends 2025"):
            return "trends"
        if query == self.keyword:
            return "related"
        return "pain_points"

    def _competitors(self, query: str) -> dict:
        return {
            "organic_results": [
                {
                    "link": "https://www.asana.com/",
                    "title": "Asana",
                    "snippet": "The best trusted work management platform for quality teams",
                },
                {
                    "link": "https://monday.com/",
                    "title": "monday.com",
                    "snippet": "Affordable and fast project tracking with great service",
                },
                {"link": "https://trello.com/", "title": "Trello", "snippet": "Boards"},
            ]
        }

    def _related(self, query: str) -> dict:
        return {
            "related_searches": [
                {"query": "best project management software"},
                {"query": "free project management tools"},
            ]
        }

    def _trends(self, query: str) -> dict:
        return {
            "organic_results": [
                {"title": "Project Management Trends Shaping Remote Work"},
                {"title": "Automation and Remote Collaboration Grow"},
            ]
        }

    def _pain_points(self, query: str) -> dict:
        prefix = "reddit" if "reddit" in query else "web"
        return {
            "organic_results": [
                {
                    "snippet": "Too many notifications and a confusing interface",
                    "link": f"https://{prefix}.example/1",
                },
                {
                    "snippet": f"Pricing jumps for small teams ({prefix})",
                    "link": f"https://{prefix}.example/2",
                },
            ]
        }

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached settings and lazily-built clients between tests"""
    import src.cache.store as store
    import src.graph.builder as builder
    import src.llm.claude_client as claude_client
    import src.tools.scraper as scraper
    import src.tools.search as search

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    store._research_cache = None
    scraper._scraper_tool = None
    search._search_tool = None
    claude_client._claude_client = None
    builder._compiled_graph = None


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def fake_upstash():
    return FakeUpstash()


@pytest.fixture
def fake_serp():
    return FakeSerpApi()
