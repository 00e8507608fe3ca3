"""Unit tests for component assembly in tunetide.main."""

from __future__ import annotations

import pytest

from tunetide.main import build_components, shutdown, startup
from tunetide.services.search_service import SearchService
from tunetide.utils.errors import ConfigurationError


def test_build_components_wires_services(settings) -> None:
    components = build_components(settings, config={})
    for key in (
        "catalog",
        "play_history",
        "preferences",
        "embedding_service",
        "description_service",
        "song_index",
        "recommendation_service",
        "preference_tracker",
        "play_tracker",
        "song_indexer",
        "indexing_queue",
        "search_service",
    ):
        assert key in components
    assert isinstance(components["search_service"], SearchService)
    assert components["embedding_service"].dimension == settings.embedding_dimension


def test_tuning_read_from_config(settings) -> None:
    components = build_components(settings, config={"recommendation": {"cache_size": 7}})
    assert components["recommendation_service"].tuning.cache_size == 7


def test_invalid_tuning_fails_fast(settings) -> None:
    with pytest.raises(ConfigurationError):
        build_components(settings, config={"recommendation": {"genre_weight": 0.9}})


@pytest.mark.asyncio
async def test_startup_and_shutdown(settings) -> None:
    components = build_components(settings, config={})
    await startup(components)
    assert components["indexing_queue"].running is True
    assert await components["song_index"].count() == 0
    await shutdown(components)
    assert components["indexing_queue"].running is False
