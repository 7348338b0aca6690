"""Groq chat-completion provider (OpenAI-compatible API)."""

import logging
from typing import Any

import httpx

from ..config import DEFAULT_GROQ_API_URL, DEFAULT_GROQ_MODEL
from ..errors import ConfigurationError, UpstreamError
from .base import LLMProvider

logger = logging.getLogger(__name__)


class GroqProvider(LLMProvider):
    """Calls an OpenAI-compatible /chat/completions endpoint with a bearer key.

    A fresh httpx.AsyncClient is opened per call unless one is injected.
    """

    name = "groq"

    def __init__(
        self,
        api_key: str | None,
        api_url: str = DEFAULT_GROQ_API_URL,
        model: str = DEFAULT_GROQ_MODEL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._client = client

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0,
            "max_tokens": 2000,
            "top_p": 1,
        }

    async def complete(self, prompt: str) -> str:
        """Send the prompt, return choices[0].message.content.

        Raises:
            ConfigurationError: GROQ_API_KEY is not set.
            UpstreamError: Transport failure, non-2xx status or unexpected body.
        """
        if not self.api_key:
            raise ConfigurationError("GROQ_API_KEY environment variable is not set")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.api_url, json=self._payload(prompt), headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.api_url, json=self._payload(prompt), headers=headers
                    )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response) or str(e)
            logger.error(f"Groq API Error: {e.response.status_code} {message}")
            raise UpstreamError(f"Groq API Error: {message}") from e
        except httpx.HTTPError as e:
            logger.error(f"Groq API Error: {e}")
            raise UpstreamError(f"Groq API Error: {e}") from e

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Groq API Error: unexpected response body") from e


def _error_message(response: httpx.Response) -> str | None:
    """Pull error.message out of an OpenAI-style error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message")
        if isinstance(error, str):
            return error
    return None
