"""Embedding provider implementations."""

from tunetide.providers.embedding.hash_embedding_provider import (
    HashEmbeddingProvider,
    hash_embedding,
)
from tunetide.providers.embedding.openai_compatible_embedding_provider import (
    OpenAICompatibleEmbeddingProvider,
)

__all__ = ["HashEmbeddingProvider", "OpenAICompatibleEmbeddingProvider", "hash_embedding"]
