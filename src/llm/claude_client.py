"""Anthropic Claude integration used for brand extraction and ad copy"""

import logging

from anthropic import AsyncAnthropic

from src.config import get_settings
from src.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ClaudeClient:
    """Client for the Anthropic Messages API"""

    def __init__(self):
        self.settings = get_settings()
        if not self.settings.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set")
        self.client = AsyncAnthropic(
            api_key=self.settings.anthropic_api_key,
            timeout=self.settings.http_timeout,
        )
        self.model = self.settings.claude_model
        logger.info("Claude client initialized (%s)", self.model)

    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
        max_tokens: int = 2048,
    ) -> str:
        """
        Generate a text response from Claude.

        Args:
            prompt: The user prompt
            system_instruction: Optional system prompt
            max_tokens: Output token cap

        Returns:
            Concatenated text blocks of the reply
        """
        kwargs = {}
        if system_instruction:
            kwargs["system"] = system_instruction

        message = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )

        return "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )


# Singleton instance
_claude_client: ClaudeClient | None = None


def get_claude_client() -> ClaudeClient:
    """Get the Claude client singleton"""
    global _claude_client
    if _claude_client is None:
        _claude_client = ClaudeClient()
    return _claude_client
