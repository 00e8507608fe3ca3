"""Abstract base class for text-generation (completion) providers.

Used only to write short song descriptions that feed the embedding step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAICompatibleCompletionProvider (tunetide/providers/llm/)
class ITextGenerationProvider(ABC):
    """Contract for prompt-in, text-out generation services."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        max_tokens: int = 100,
        temperature: float = 0.7,
        stop: list[str] | None = None,
    ) -> str:
        """Complete *prompt* and return the generated text, stripped.

        Raises
        ------
        tunetide.utils.errors.TextGenerationError
            If the endpoint errors or returns empty text.
        tunetide.utils.errors.ProviderUnavailableError
            If the endpoint is unreachable or the call timed out.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""

    @abstractmethod
    async def check_health(self) -> bool:
        """Return ``True`` if the backing service answers right now."""
