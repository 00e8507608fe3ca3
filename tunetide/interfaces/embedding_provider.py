"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into fixed-length vectors.
Implementations may wrap an OpenAI-compatible ``/embeddings`` endpoint
(vLLM, Infinity, OpenAI itself) or compute a deterministic local vector.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAICompatibleEmbeddingProvider -- remote endpoint, may fail
#   HashEmbeddingProvider             -- deterministic, never fails
# Located in: tunetide/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for embedding services used by indexing and search.

    Vectors are consumed by
    :class:`~tunetide.interfaces.vector_store_provider.ISongVectorIndex`.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, each of length
            :meth:`get_dimension`.

        Raises
        ------
        tunetide.utils.errors.EmbeddingError
            If the endpoint rejects the request or the model cannot embed.
        tunetide.utils.errors.ProviderUnavailableError
            If the endpoint is unreachable or the call timed out.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of produced vectors.

        Must match the dimension of vectors already stored in the index.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Does not contact the remote service; see :meth:`check_health`.
        """

    @abstractmethod
    async def check_health(self) -> bool:
        """Return ``True`` if the backing service answers right now."""
