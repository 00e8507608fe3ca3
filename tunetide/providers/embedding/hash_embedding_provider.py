"""Deterministic hash embedding.

Maps text to a fixed-length vector derived from its SHA-256 digest.  The
vector carries no semantics (similar texts do not land near each other)
but it is stable, so a song indexed while the embedding service was down
keeps the same vector until it is re-indexed.
"""

from __future__ import annotations

import hashlib

from tunetide.interfaces.embedding_provider import IEmbeddingProvider


def hash_embedding(text: str, dimension: int) -> list[float]:
    """Return a *dimension*-length vector in ``[-1, 1]`` for *text*.

    The text is lower-cased before hashing.  Digest bytes are reused
    cyclically and each byte ``b`` maps to ``b / 127.5 - 1``.
    """
    if dimension < 1:
        raise ValueError(f"dimension must be positive, got {dimension}")
    digest = hashlib.sha256(text.lower().encode("utf-8")).digest()
    return [digest[i % len(digest)] / 127.5 - 1.0 for i in range(dimension)]


class HashEmbeddingProvider(IEmbeddingProvider):
    """Local, always-available embedding provider used as a fallback."""

    def __init__(self, dimension: int = 1024) -> None:
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self._dimension = dimension

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [hash_embedding(t, self._dimension) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return hash_embedding(text, self._dimension)

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "hash_embedding"

    def is_available(self) -> bool:
        return True

    async def check_health(self) -> bool:
        return True
