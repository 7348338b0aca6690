from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "base"

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send a prompt to the model, return the raw response text."""
        pass
