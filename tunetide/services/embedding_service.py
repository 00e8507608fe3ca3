"""Embedding with a guaranteed answer.

:class:`EmbeddingService` asks the configured remote provider first and,
on any failure or timeout, answers with the deterministic hash embedding
of the same dimension.  Indexing and search both go through it, so a
downed embedding server degrades quality but never breaks either path.
"""

from __future__ import annotations

import asyncio

from tunetide.interfaces.embedding_provider import IEmbeddingProvider
from tunetide.models.search import EmbeddingResult
from tunetide.providers.embedding.hash_embedding_provider import HashEmbeddingProvider
from tunetide.utils.logging import get_logger


class EmbeddingService:
    """Primary embedding provider with a hash-embedding fallback.

    Parameters
    ----------
    primary:
        Remote provider, or ``None`` to always use the fallback.
    dimension:
        Vector length every returned embedding must have.  The fallback is
        built with this dimension, and primary vectors of any other length
        are rejected.
    timeout:
        Upper bound, in seconds, on one primary call.
    """

    def __init__(
        self,
        primary: IEmbeddingProvider | None,
        dimension: int,
        timeout: float = 20.0,
    ) -> None:
        self._primary = primary
        self._fallback = HashEmbeddingProvider(dimension)
        self._dimension = dimension
        self._timeout = timeout
        self._logger = get_logger(__name__)

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        """Return a vector for *text*.  Never raises."""
        result = await self.embed_detailed(text)
        return result.vector

    async def embed_detailed(self, text: str) -> EmbeddingResult:
        """Like :meth:`embed`, but also report which provider answered."""
        if self._primary is not None and self._primary.is_available():
            try:
                vector = await asyncio.wait_for(
                    self._primary.embed_single(text), timeout=self._timeout
                )
                if len(vector) == self._dimension:
                    return EmbeddingResult(
                        vector=vector,
                        provider=self._primary.get_provider_name(),
                    )
                self._logger.warning(
                    "embedding_dimension_mismatch",
                    provider=self._primary.get_provider_name(),
                    got=len(vector),
                    expected=self._dimension,
                )
            except asyncio.TimeoutError:
                self._logger.warning(
                    "embedding_timeout",
                    provider=self._primary.get_provider_name(),
                    timeout=self._timeout,
                )
            except Exception as exc:
                self._logger.warning(
                    "embedding_failed",
                    provider=self._primary.get_provider_name(),
                    error=str(exc),
                )

        vector = await self._fallback.embed_single(text)
        return EmbeddingResult(
            vector=vector,
            provider=self._fallback.get_provider_name(),
            fallback=True,
        )

    async def check_health(self) -> bool:
        """Return ``True`` if the primary provider answers."""
        if self._primary is None:
            return False
        try:
            return await self._primary.check_health()
        except Exception as exc:
            self._logger.warning("embedding_health_check_failed", error=str(exc))
            return False
