"""Tests for the research and ad generation triggers"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_result, make_settings
from src.errors import ConfigurationError, RateLimitError, ResearchError
from src.graph.state import ResearchInput
from src.runner import (
    classify_research_error,
    handle_generate_ad_request,
    handle_research_request,
    run_research,
)


VALID_PAYLOAD = {
    "websiteUrl": "https://acme.com",
    "productType": "project management software",
    "campaignGoal": "full-research",
}

AD_PAYLOAD = {
    "provider": "claude",
    "name": "Acme",
    "product": "Project management software",
    "targetAudience": "Remote teams",
    "keyBenefits": "Real-time sync",
}


class TestRunResearch:
    """Tests for the research entry point"""

    @pytest.mark.asyncio
    async def test_missing_keys_fail_before_any_call(self):
        """Test that missing credentials never reach the pipeline"""
        settings = make_settings(firecrawl_api_key="", serp_api_key="")
        with patch("src.runner.get_settings", return_value=settings), \
             patch("src.runner.get_compiled_graph") as get_graph:
            with pytest.raises(ConfigurationError, match="FIRECRAWL_API_KEY, SERP_API_KEY"):
                await run_research(
                    ResearchInput(
                        url="https://acme.com",
                        product_type="crm",
                        objective="full-research",
                    )
                )

        get_graph.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_graph_result(self):
        graph = MagicMock()
        graph.ainvoke = AsyncMock(return_value={"result": make_result()})
        research_input = ResearchInput(
            url="https://acme.com", product_type="crm", objective="full-research"
        )

        with patch("src.runner.get_settings", return_value=make_settings()), \
             patch("src.runner.get_compiled_graph", return_value=graph):
            result = await run_research(research_input, force_refresh=True)

        assert result.quality_score == 55
        state = graph.ainvoke.call_args.args[0]
        assert state["research_input"] == research_input
        assert state["force_refresh"] is True


class TestClassifyResearchError:
    """Tests for failure classification"""

    def test_rate_limit(self):
        assert classify_research_error(str(RateLimitError(
            "SerpAPI rate limit exceeded. Please wait before retrying."
        ))) == ("API rate limit exceeded. Please try again in a few minutes.", 429)

    def test_timeout(self):
        error, status = classify_research_error("Request timed out")
        assert status == 504
        assert error.startswith("Research request timed out")

    def test_scrape_failure(self):
        message = "Failed to analyze website: Failed to scrape https://x.com after 3 attempts: boom"
        assert classify_research_error(message) == (f"Unable to analyze website: {message}", 400)

    def test_generic(self):
        assert classify_research_error("boom") == ("Research failed: boom", 500)


class TestHandleResearchRequest:
    """Tests for the research trigger"""

    @pytest.mark.asyncio
    async def test_missing_keys_return_503(self):
        settings = make_settings(anthropic_api_key="")
        with patch("src.runner.get_settings", return_value=settings), \
             patch("src.runner.run_research") as run:
            response = await handle_research_request(VALID_PAYLOAD)

        assert response.success is False
        assert response.status_code == 503
        assert response.error.startswith("Missing required API keys: ANTHROPIC_API_KEY")
        run.assert_not_called()

    @pytest.mark.asyncio
    async def test_validation_errors_have_field_details(self):
        payload = {"websiteUrl": "acme", "productType": "x", "campaignGoal": "world-domination"}
        with patch("src.runner.get_settings", return_value=make_settings()):
            response = await handle_research_request(payload)

        assert response.status_code == 400
        assert response.error == "Invalid request data"
        fields = {detail.field for detail in response.details}
        assert fields == {"websiteUrl", "productType", "campaignGoal"}
        url_error = next(d for d in response.details if d.field == "websiteUrl")
        assert "Invalid website URL format" in url_error.message

    @pytest.mark.asyncio
    async def test_success_response(self):
        run = AsyncMock(return_value=make_result())
        with patch("src.runner.get_settings", return_value=make_settings()), \
             patch("src.runner.run_research", run):
            response = await handle_research_request(VALID_PAYLOAD)

        assert response.success is True
        assert response.status_code == 200
        assert response.duration >= 0
        research_input, force_refresh = run.call_args.args
        assert research_input.url == "https://acme.com"
        # Location was not supplied, so it stays open for URL inference
        assert research_input.location is None
        assert force_refresh is False

        body = json.loads(response.model_dump_json(by_alias=True, exclude_none=True))
        assert body["data"]["qualityScore"] == 55
        assert "statusCode" not in body

    @pytest.mark.asyncio
    async def test_explicit_location_is_forwarded(self):
        run = AsyncMock(return_value=make_result())
        with patch("src.runner.get_settings", return_value=make_settings()), \
             patch("src.runner.run_research", run):
            await handle_research_request(
                dict(VALID_PAYLOAD, location="Canada", forceRefresh=True)
            )

        research_input, force_refresh = run.call_args.args
        assert research_input.location == "Canada"
        assert force_refresh is True

    @pytest.mark.asyncio
    async def test_brand_failure_maps_to_400(self):
        run = AsyncMock(side_effect=ResearchError(
            "Failed to analyze website: Invalid URL format: https://acme"
        ))
        with patch("src.runner.get_settings", return_value=make_settings()), \
             patch("src.runner.run_research", run):
            response = await handle_research_request(VALID_PAYLOAD)

        assert response.success is False
        assert response.status_code == 400
        assert response.error.startswith("Unable to analyze website:")
        assert response.data is None


class TestHandleGenerateAdRequest:
    """Tests for the ad generation trigger"""

    @pytest.mark.asyncio
    async def test_generates_ad(self):
        client = MagicMock()
        client.generate = AsyncMock(
            return_value='{"hook": "Stop juggling tabs", "body": "One board.", "cta": "Try free"}'
        )
        with patch("src.llm.providers.get_claude_client", return_value=client):
            response = await handle_generate_ad_request(AD_PAYLOAD)

        assert response.success is True
        assert response.provider == "claude"
        assert response.data.hook == "Stop juggling tabs"
        prompt = client.generate.call_args.args[0]
        assert "Brand Name: Acme" in prompt

    @pytest.mark.asyncio
    async def test_research_is_embedded_in_prompt(self):
        client = MagicMock()
        client.generate_json = AsyncMock(return_value='{"hook": "h", "body": "b", "cta": "c"}')
        research = json.loads(make_result().model_dump_json(by_alias=True))
        payload = dict(AD_PAYLOAD, provider="openai", research=research)

        with patch("src.llm.providers.get_openai_client", return_value=client):
            response = await handle_generate_ad_request(payload)

        assert response.success is True
        prompt = client.generate_json.call_args.args[0]
        assert "RESEARCH-POWERED INSIGHTS (data quality: 55/100)" in prompt

    @pytest.mark.asyncio
    async def test_missing_fields_rejected(self):
        payload = {k: v for k, v in AD_PAYLOAD.items() if k != "keyBenefits"}

        response = await handle_generate_ad_request(payload)

        assert response.success is False
        assert response.status_code == 400
        assert [d.field for d in response.details] == ["keyBenefits"]

    @pytest.mark.asyncio
    async def test_provider_failure(self):
        client = MagicMock()
        client.generate = AsyncMock(return_value="Sorry, I can't help with that.")
        with patch("src.llm.providers.get_gemini_client", return_value=client):
            response = await handle_generate_ad_request(dict(AD_PAYLOAD, provider="gemini"))

        assert response.success is False
        assert response.status_code == 500
        assert response.error == "Failed to generate ad with gemini"
        assert response.provider == "gemini"
