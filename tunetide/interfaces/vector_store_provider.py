"""Abstract base class for the song vector index.

The index stores exactly one record per catalog song, keyed by the durable
``song_id`` property plus an index-local record id.  Vectors are always
supplied by the caller; the index never computes them itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tunetide.models.search import SongEmbeddingRecord, VectorHit


# Concrete implementation: ChromaDBSongIndex (tunetide/providers/vector_store/)
class ISongVectorIndex(ABC):
    """Contract for storing and querying song vectors under cosine distance."""

    @abstractmethod
    async def ensure_schema(self) -> None:
        """Create the song collection if it does not exist (idempotent)."""

    @abstractmethod
    async def find_by_song_id(self, song_id: int) -> SongEmbeddingRecord | None:
        """Return the stored record for *song_id*, or ``None``."""

    @abstractmethod
    async def upsert_song(
        self,
        record: SongEmbeddingRecord,
        vector: list[float],
    ) -> tuple[str, bool]:
        """Create or update the record for ``record.song_id``.

        Implementations must look the song up by ``song_id`` first and
        update that record in place when it exists, so a song never has
        two records.

        Returns
        -------
        tuple[str, bool]
            The index-local record id and ``True`` if a new record was
            created (``False`` for an in-place update).

        Raises
        ------
        tunetide.utils.errors.VectorIndexError
            If the write fails.
        """

    @abstractmethod
    async def query_nearest(self, vector: list[float], limit: int = 10) -> list[VectorHit]:
        """Return up to *limit* nearest songs in ascending cosine distance.

        Raises
        ------
        tunetide.utils.errors.VectorIndexError
            If the query fails.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored song records."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this index."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the index can be reached."""
