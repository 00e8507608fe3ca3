"""Unit tests for EmbeddingService and its hash fallback."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from tunetide.providers.embedding.hash_embedding_provider import hash_embedding
from tunetide.services.embedding_service import EmbeddingService
from tunetide.utils.errors import EmbeddingError, ProviderUnavailableError


@pytest.mark.asyncio
async def test_uses_primary_when_healthy(mock_embedding_provider) -> None:
    service = EmbeddingService(mock_embedding_provider, dimension=16)
    result = await service.embed_detailed("happy")
    assert result.vector == [0.25] * 16
    assert result.provider == "mock_embedding"
    assert result.fallback is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ProviderUnavailableError(message="down"),
        EmbeddingError(message="model does not support embeddings"),
        RuntimeError("unexpected"),
    ],
)
async def test_falls_back_to_hash_on_failure(mock_embedding_provider, error) -> None:
    mock_embedding_provider.embed_single = AsyncMock(side_effect=error)
    service = EmbeddingService(mock_embedding_provider, dimension=16)

    result = await service.embed_detailed("need a party song")

    assert result.fallback is True
    assert result.provider == "hash_embedding"
    assert result.vector == hash_embedding("need a party song", 16)


@pytest.mark.asyncio
async def test_falls_back_on_timeout(mock_embedding_provider) -> None:
    async def _slow(_text: str) -> list[float]:
        await asyncio.sleep(5)
        return [0.0] * 16

    mock_embedding_provider.embed_single = _slow
    service = EmbeddingService(mock_embedding_provider, dimension=16, timeout=0.01)

    vector = await service.embed("slow")

    assert vector == hash_embedding("slow", 16)


@pytest.mark.asyncio
async def test_wrong_dimension_from_primary_falls_back(mock_embedding_provider) -> None:
    mock_embedding_provider.embed_single = AsyncMock(return_value=[0.1] * 4)
    service = EmbeddingService(mock_embedding_provider, dimension=16)
    result = await service.embed_detailed("x")
    assert result.fallback is True
    assert len(result.vector) == 16


@pytest.mark.asyncio
async def test_no_primary_always_hash() -> None:
    service = EmbeddingService(None, dimension=32)
    vector = await service.embed("calm")
    assert vector == hash_embedding("calm", 32)
    assert await service.check_health() is False


@pytest.mark.asyncio
async def test_unavailable_primary_is_skipped(mock_embedding_provider) -> None:
    mock_embedding_provider.is_available.return_value = False
    service = EmbeddingService(mock_embedding_provider, dimension=16)
    result = await service.embed_detailed("x")
    assert result.fallback is True
    mock_embedding_provider.embed_single.assert_not_called()


@pytest.mark.asyncio
async def test_check_health_swallows_errors(mock_embedding_provider) -> None:
    mock_embedding_provider.check_health = AsyncMock(side_effect=RuntimeError("boom"))
    service = EmbeddingService(mock_embedding_provider, dimension=16)
    assert await service.check_health() is False
