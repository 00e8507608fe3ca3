"""Song indexing: description, embedding, vector upsert.

Indexing a song means

1. making sure it has a description (generating and persisting one if not),
2. embedding ``title artist album genre description`` as one string, and
3. writing the vector to the index under the song's id, updating the
   existing record when there is one.

Single-song indexing is triggered from catalog writes through
:class:`~tunetide.services.indexing_queue.IndexingQueue`; bulk backfills
run here sequentially with a short pause between songs to stay gentle on
the embedding and completion servers.
"""

from __future__ import annotations

import asyncio

from tunetide.config.tuning import IndexingTuning
from tunetide.interfaces.catalog_provider import ICatalogProvider
from tunetide.interfaces.vector_store_provider import ISongVectorIndex
from tunetide.models.search import BackfillReport, IndexingResult, SongEmbeddingRecord
from tunetide.models.song import Song
from tunetide.services.description_service import DescriptionService
from tunetide.services.embedding_service import EmbeddingService
from tunetide.utils.logging import get_logger
from tunetide.utils.text import build_song_text


class SongIndexer:
    """Keeps the vector index in step with the catalog."""

    def __init__(
        self,
        catalog: ICatalogProvider,
        descriptions: DescriptionService,
        embeddings: EmbeddingService,
        index: ISongVectorIndex,
        tuning: IndexingTuning | None = None,
    ) -> None:
        self._catalog = catalog
        self._descriptions = descriptions
        self._embeddings = embeddings
        self._index = index
        self._tuning = tuning or IndexingTuning()
        self._logger = get_logger(__name__)

    async def index_song(self, song: Song) -> IndexingResult:
        """Describe, embed and upsert *song*.

        Raises
        ------
        tunetide.utils.errors.VectorIndexError
            If the index write fails.  Description and embedding problems
            never raise; they degrade to the template and hash fallbacks.
        """
        description = await self._descriptions.ensure_description(song)
        generated = not song.has_description
        if generated:
            try:
                await self._catalog.set_description(song.id, description)
            except Exception as exc:
                # The vector still gets the description; the next run retries the save.
                self._logger.warning(
                    "description_persist_failed", song_id=song.id, error=str(exc)
                )

        song_text = build_song_text(
            song.title, song.artist_name, song.album_title, song.genre, description
        )
        embedding = await self._embeddings.embed_detailed(song_text)
        record = SongEmbeddingRecord.from_song(song, description)
        record_id, created = await self._index.upsert_song(record, embedding.vector)

        self._logger.info(
            "song_indexed",
            song_id=song.id,
            record_id=record_id,
            created=created,
            description_generated=generated,
            embedding_provider=embedding.provider,
        )
        return IndexingResult(
            song_id=song.id,
            record_id=record_id,
            created=created,
            description_generated=generated,
            embedding_fallback=embedding.fallback,
        )

    async def reindex_song(self, song_id: int) -> IndexingResult | None:
        """Re-index the current catalog state of *song_id*.

        Returns ``None`` if the song no longer exists.
        """
        song = await self._catalog.get_song(song_id)
        if song is None:
            self._logger.warning("reindex_unknown_song", song_id=song_id)
            return None
        return await self.index_song(song)

    async def index_all_songs(self) -> BackfillReport:
        """Index every catalog song, one at a time."""
        songs = await self._catalog.list_songs()
        return await self._backfill(songs, label="all")

    async def index_missing_descriptions(self) -> BackfillReport:
        """Describe and index only the songs that lack a description."""
        songs = await self._catalog.list_songs_missing_description()
        return await self._backfill(songs, label="missing_descriptions")

    async def _backfill(self, songs: list[Song], label: str) -> BackfillReport:
        await self._index.ensure_schema()
        self._logger.info("backfill_started", scope=label, total=len(songs))

        indexed = 0
        failed: list[int] = []
        delay = self._tuning.backfill_delay_seconds
        for position, song in enumerate(songs):
            try:
                await self.index_song(song)
                indexed += 1
            except Exception as exc:
                failed.append(song.id)
                self._logger.error(
                    "backfill_song_failed", scope=label, song_id=song.id, error=str(exc)
                )
            if delay > 0 and position < len(songs) - 1:
                await asyncio.sleep(delay)

        report = BackfillReport(
            total=len(songs),
            indexed=indexed,
            failed=len(failed),
            failed_song_ids=failed,
        )
        self._logger.info(
            "backfill_finished",
            scope=label,
            total=report.total,
            indexed=report.indexed,
            failed=report.failed,
        )
        return report
