"""Shared pytest fixtures for the TuneTide test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from tunetide.config.settings import Settings
from tunetide.config.tuning import IndexingTuning, RecommendationTuning
from tunetide.interfaces.embedding_provider import IEmbeddingProvider
from tunetide.interfaces.text_generation_provider import ITextGenerationProvider
from tunetide.models.song import Song
from tunetide.providers.catalog.sqlite_catalog_provider import SQLiteCatalogProvider
from tunetide.providers.history.sqlite_play_history_provider import SQLitePlayHistoryProvider
from tunetide.providers.preferences.sqlite_preference_store import SQLitePreferenceStore

TEST_DIMENSION = 16


# ---------------------------------------------------------------------------
# Settings / tuning
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every store at the temp directory."""
    return Settings(
        embedding_base_url="http://embed.test/v1",
        embedding_model="test-embed",
        embedding_dimension=TEST_DIMENSION,
        text_generation_base_url="http://generate.test/v1",
        text_generation_model="test-llm",
        chromadb_persist_dir=str(tmp_path / "chroma"),
        chromadb_collection="test_songs",
        database_path=str(tmp_path / "tunetide.db"),
        config_path=str(tmp_path / "missing.yaml"),
    )


@pytest.fixture
def rec_tuning() -> RecommendationTuning:
    return RecommendationTuning()


@pytest.fixture
def fast_indexing() -> IndexingTuning:
    """Backfill tuning with no inter-song delay."""
    return IndexingTuning(backfill_delay_seconds=0.0)


# ---------------------------------------------------------------------------
# SQLite stores (one shared temp database)
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "tunetide.db"


@pytest_asyncio.fixture
async def catalog(db_path: Path) -> SQLiteCatalogProvider:
    provider = SQLiteCatalogProvider(db_path=db_path)
    await provider.initialize()
    return provider


@pytest_asyncio.fixture
async def play_history(db_path: Path, catalog: SQLiteCatalogProvider) -> SQLitePlayHistoryProvider:
    provider = SQLitePlayHistoryProvider(db_path=db_path)
    await provider.initialize()
    return provider


@pytest_asyncio.fixture
async def preferences(db_path: Path, catalog: SQLiteCatalogProvider) -> SQLitePreferenceStore:
    store = SQLitePreferenceStore(db_path=db_path)
    await store.initialize()
    return store


@pytest_asyncio.fixture
async def seeded(catalog: SQLiteCatalogProvider) -> dict[str, Any]:
    """A small catalog: three artists, nine songs, one without a genre.

    Songs are inserted oldest first, so within an artist the last one added
    is the "newest".
    """
    daft = await catalog.add_artist("Daft Punk")
    adele = await catalog.add_artist("Adele")
    justice = await catalog.add_artist("Justice")

    discovery = await catalog.add_album("Discovery", daft, "https://img.test/discovery.jpg")
    twenty_five = await catalog.add_album("25", adele)

    songs: dict[str, Song] = {}
    songs["one_more_time"] = await catalog.add_song(
        "One More Time", daft, discovery, "electronic",
        "An euphoric, high-energy dance anthem made for the party",
    )
    songs["aerodynamic"] = await catalog.add_song("Aerodynamic", daft, discovery, "electronic")
    songs["digital_love"] = await catalog.add_song(
        "Digital Love", daft, discovery, "electronic", "Warm, nostalgic and dreamy"
    )
    songs["harder"] = await catalog.add_song("Harder Better Faster Stronger", daft, discovery, "electronic")
    songs["hello"] = await catalog.add_song(
        "Hello", adele, twenty_five, "pop",
        "A sad, slow ballad about regret and heartbreak",
    )
    songs["when_we_were_young"] = await catalog.add_song(
        "When We Were Young", adele, twenty_five, "pop"
    )
    songs["dance"] = await catalog.add_song(
        "D.A.N.C.E.", justice, None, "electronic", "Playful disco party groove"
    )
    songs["genesis"] = await catalog.add_song("Genesis", justice, None, "electronic")
    songs["untagged"] = await catalog.add_song("Untitled Demo", justice)

    return {
        "artists": {"daft_punk": daft, "adele": adele, "justice": justice},
        "albums": {"discovery": discovery, "25": twenty_five},
        "songs": songs,
    }


# ---------------------------------------------------------------------------
# Mocked model endpoints
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    mock = MagicMock(spec=IEmbeddingProvider)
    mock.embed_single = AsyncMock(return_value=[0.25] * TEST_DIMENSION)
    mock.embed = AsyncMock(return_value=[[0.25] * TEST_DIMENSION])
    mock.get_dimension.return_value = TEST_DIMENSION
    mock.get_provider_name.return_value = "mock_embedding"
    mock.is_available.return_value = True
    mock.check_health = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_text_generator() -> MagicMock:
    mock = MagicMock(spec=ITextGenerationProvider)
    mock.generate = AsyncMock(return_value="An uplifting, energetic track built for dancing")
    mock.get_provider_name.return_value = "mock_llm"
    mock.is_available.return_value = True
    mock.check_health = AsyncMock(return_value=True)
    return mock


def _make_song(**overrides: Any) -> Song:
    fields: dict[str, Any] = {
        "id": 1,
        "title": "Test Song",
        "artist_id": 1,
        "artist_name": "Test Artist",
        "album_id": None,
        "album_title": None,
        "genre": "rock",
        "description": None,
    }
    fields.update(overrides)
    return Song(**fields)


@pytest.fixture
def make_song():
    """Factory building a :class:`Song` without touching a database."""
    return _make_song
