from ..config import Settings
from ..errors import ConfigurationError
from .base import LLMProvider
from .gemini import GeminiProvider
from .groq import GroqProvider
from .mock import MockLLMProvider

__all__ = ["LLMProvider", "GroqProvider", "GeminiProvider", "MockLLMProvider", "get_provider"]


def get_provider(settings: Settings) -> LLMProvider:
    """Build the provider named by settings.llm_provider."""
    if settings.llm_provider == "groq":
        return GroqProvider(
            api_key=settings.groq_api_key,
            api_url=settings.groq_api_url,
            model=settings.groq_model,
            timeout=settings.http_timeout_seconds,
        )
    if settings.llm_provider == "gemini":
        return GeminiProvider(api_key=settings.gemini_api_key, model=settings.gemini_model)
    if settings.llm_provider == "mock":
        return MockLLMProvider()
    raise ConfigurationError(f"Unknown LLM_PROVIDER '{settings.llm_provider}'")
