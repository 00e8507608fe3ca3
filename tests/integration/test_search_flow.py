"""Integration: catalog -> indexing -> natural-language search.

Real SQLite and ChromaDB (temp dirs); the embedding and completion
endpoints are replaced with in-process fakes.  The fake embedder counts a
few mood keywords so that semantically related texts land close together.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import pytest_asyncio

from tunetide.interfaces.embedding_provider import IEmbeddingProvider
from tunetide.main import build_components, shutdown, startup
from tunetide.utils.errors import ProviderUnavailableError
from tunetide.utils.text import tokenize

pytestmark = pytest.mark.integration

_KEYWORDS = ("party", "sad", "calm", "dance", "energy")
DIM = 16


class KeywordEmbeddingProvider(IEmbeddingProvider):
    """Counts mood keywords; a constant bias keeps vectors non-zero."""

    def __init__(self) -> None:
        self.down = False

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if self.down:
            raise ProviderUnavailableError(message="embedding server offline")
        vectors = []
        for text in texts:
            tokens = tokenize(text)
            vector = [float(tokens.count(k)) for k in _KEYWORDS]
            vector += [0.0] * (DIM - len(vector) - 1) + [0.1]
            vectors.append(vector)
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_dimension(self) -> int:
        return DIM

    def get_provider_name(self) -> str:
        return "keyword_fake"

    def is_available(self) -> bool:
        return True

    async def check_health(self) -> bool:
        return not self.down


@pytest.fixture
def embedder() -> KeywordEmbeddingProvider:
    return KeywordEmbeddingProvider()


@pytest_asyncio.fixture
async def app(settings, embedder, mock_text_generator):
    with patch("tunetide.main.OpenAICompatibleEmbeddingProvider", return_value=embedder), patch(
        "tunetide.main.OpenAICompatibleCompletionProvider", return_value=mock_text_generator
    ):
        components = build_components(settings, config={"indexing": {"backfill_delay_seconds": 0}})
    await startup(components, start_workers=False)
    yield components
    await shutdown(components)


@pytest_asyncio.fixture
async def library(app):
    catalog = app["catalog"]
    lmfao = await catalog.add_artist("LMFAO")
    adele = await catalog.add_artist("Adele")
    marconi = await catalog.add_artist("Marconi Union")
    return {
        "party": await catalog.add_song(
            "Party Rock Anthem", lmfao, genre="electro",
            description="High energy party banger for the dance floor",
        ),
        "sad": await catalog.add_song(
            "Someone Like You", adele, genre="pop",
            description="A sad piano ballad about lost love",
        ),
        "calm": await catalog.add_song(
            "Weightless", marconi, genre="ambient",
            description="Calm, slow and soothing",
        ),
        "undescribed": await catalog.add_song("Untitled", marconi, genre="ambient"),
    }


@pytest.mark.asyncio
async def test_empty_index_uses_lexical_fallback(app, library) -> None:
    response = await app["search_service"].search_natural_language("need a party song")
    assert response.source == "lexical"
    assert [s.title for s in response.songs] == ["Party Rock Anthem"]


@pytest.mark.asyncio
async def test_indexed_catalog_answers_by_meaning(app, library) -> None:
    report = await app["song_indexer"].index_all_songs()
    assert (report.total, report.indexed, report.failed) == (4, 4, 0)
    assert await app["song_index"].count() == 4

    party = await app["search_service"].search_natural_language("need a party song", limit=2)
    sad = await app["search_service"].search_natural_language("I'm feeling sad", limit=1)

    assert party.source == "vector"
    assert party.songs[0].title == "Party Rock Anthem"
    assert len(party.songs) == 2
    assert [s.title for s in sad.songs] == ["Someone Like You"]


@pytest.mark.asyncio
async def test_backfill_persists_generated_description(app, library) -> None:
    report = await app["song_indexer"].index_missing_descriptions()

    assert report.total == 1
    song = await app["catalog"].get_song(library["undescribed"].id)
    assert song.description == "An uplifting, energetic track built for dancing"
    record = await app["song_index"].find_by_song_id(song.id)
    assert record.description == song.description


@pytest.mark.asyncio
async def test_reindexing_keeps_one_record_per_song(app, library) -> None:
    song_id = library["calm"].id
    first = await app["song_indexer"].reindex_song(song_id)
    await app["catalog"].set_description(song_id, "Calm and very calm")
    second = await app["song_indexer"].reindex_song(song_id)

    assert first.created is True
    assert second.created is False
    assert second.record_id == first.record_id
    assert await app["song_index"].count() == 1
    assert (await app["song_index"].find_by_song_id(song_id)).description == "Calm and very calm"


@pytest.mark.asyncio
async def test_embedding_outage_still_indexes_and_searches(app, library, embedder) -> None:
    embedder.down = True

    result = await app["song_indexer"].reindex_song(library["party"].id)
    response = await app["search_service"].search_natural_language("party")

    assert result.embedding_fallback is True
    assert response.source == "vector"
    assert [s.title for s in response.songs] == ["Party Rock Anthem"]


@pytest.mark.asyncio
async def test_queue_indexes_in_background(app, library) -> None:
    queue = app["indexing_queue"]
    queue.start()
    for song in library.values():
        assert queue.submit(song.id) is True
    await queue.join()

    assert await app["song_index"].count() == 4


@pytest.mark.asyncio
async def test_health_reports_components(app, library) -> None:
    status = await app["search_service"].health()
    assert status == {
        "vector_index": True,
        "indexed_songs": 0,
        "embedding": True,
        "text_generation": True,
    }
