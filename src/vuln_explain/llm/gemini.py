import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import DEFAULT_GEMINI_MODEL
from ..errors import ConfigurationError, UpstreamError
from .base import LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider."""

    name = "gemini"

    def __init__(self, api_key: str | None, model: str = DEFAULT_GEMINI_MODEL):
        self.api_key = api_key
        self.model_name = model
        self.generation_config = types.GenerateContentConfig(
            temperature=0,
            max_output_tokens=2000,
        )
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def complete(self, prompt: str) -> str:
        """Send the prompt to Gemini, return the response text."""
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self.generation_config,
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API Error: {e}")
            raise UpstreamError(f"Gemini API Error: {e.message or e}") from e

        if not response.text:
            raise UpstreamError("Gemini API Error: empty response")
        return response.text
