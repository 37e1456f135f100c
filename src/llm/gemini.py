"""Google Gemini integration for ad copy generation"""

import logging

import google.generativeai as genai

from src.config import get_settings
from src.errors import ConfigurationError, ResponseParseError

logger = logging.getLogger(__name__)

AD_MAX_OUTPUT_TOKENS = 1024


class GeminiClient:
    """Gemini Flash client tuned for short JSON ad copy"""

    def __init__(self):
        self.settings = get_settings()
        if not self.settings.google_api_key:
            raise ConfigurationError("GOOGLE_API_KEY environment variable is not set")
        genai.configure(api_key=self.settings.google_api_key)

        self.model = genai.GenerativeModel(
            model_name=self.settings.gemini_model,
            generation_config=genai.GenerationConfig(
                temperature=0.7,
                top_p=0.95,
                max_output_tokens=AD_MAX_OUTPUT_TOKENS,
                response_mime_type="application/json",
            ),
        )
        logger.info("Gemini client initialized (%s)", self.settings.gemini_model)

    async def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the reply text.

        Raises:
            ResponseParseError: The reply was blocked or carried no text
        """
        response = await self.model.generate_content_async(
            prompt,
            request_options={"timeout": self.settings.http_timeout},
        )
        try:
            return response.text
        except ValueError as e:
            # .text raises when the candidate was blocked or is empty
            raise ResponseParseError(f"Gemini returned no text: {e}") from e


_gemini_client: GeminiClient | None = None


def get_gemini_client() -> GeminiClient:
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
