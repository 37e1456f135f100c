"""Ad copy provider adapters (Claude, OpenAI, Gemini)

Each adapter sends the prompt once and parses the first JSON object out of
the reply. Retries are left to the caller.
"""

import logging
from typing import Awaitable, Callable

from src.graph.state import AdContent, AdProvider
from src.llm.claude_client import get_claude_client
from src.llm.gemini import get_gemini_client
from src.llm.openai_client import get_openai_client
from src.llm.parsing import extract_json_object

logger = logging.getLogger(__name__)


def parse_ad_content(text: str) -> AdContent:
    """Turn a model reply into AdContent"""
    return AdContent.model_validate(extract_json_object(text))


async def generate_with_claude(prompt: str) -> AdContent:
    reply = await get_claude_client().generate(prompt, max_tokens=1024)
    return parse_ad_content(reply)


async def generate_with_openai(prompt: str) -> AdContent:
    reply = await get_openai_client().generate_json(prompt)
    return parse_ad_content(reply)


async def generate_with_gemini(prompt: str) -> AdContent:
    reply = await get_gemini_client().generate(prompt)
    return parse_ad_content(reply)


PROVIDERS: dict[str, Callable[[str], Awaitable[AdContent]]] = {
    "claude": generate_with_claude,
    "openai": generate_with_openai,
    "gemini": generate_with_gemini,
}


async def generate_ad(provider: AdProvider, prompt: str) -> AdContent:
    """Send an ad prompt to the selected provider"""
    adapter = PROVIDERS.get(provider)
    if adapter is None:
        raise ValueError(f"Invalid AI provider: {provider}")

    logger.info("Generating ad copy with %s", provider)
    return await adapter(prompt)
