"""Text-generation provider implementations."""

from tunetide.providers.llm.openai_compatible_completion_provider import (
    OpenAICompatibleCompletionProvider,
)

__all__ = ["OpenAICompatibleCompletionProvider"]
