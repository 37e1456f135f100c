"""OpenAI integration for ad copy generation"""

import logging

from openai import AsyncOpenAI

from src.config import get_settings
from src.errors import ConfigurationError

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Client for OpenAI chat completions in JSON mode"""

    def __init__(self):
        self.settings = get_settings()
        if not self.settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable is not set")
        self.client = AsyncOpenAI(
            api_key=self.settings.openai_api_key,
            timeout=self.settings.http_timeout,
        )
        self.model = self.settings.openai_model

    async def generate_json(self, prompt: str, max_tokens: int = 1024) -> str:
        """Generate a reply constrained to a single JSON object"""
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
        )
        return completion.choices[0].message.content or ""


# Singleton instance
_openai_client: OpenAIClient | None = None


def get_openai_client() -> OpenAIClient:
    """Get the OpenAI client singleton"""
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAIClient()
    return _openai_client
