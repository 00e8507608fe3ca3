"""Abstract base class for the song catalog.

The catalog is a plain relational datastore of songs, artists and albums.
This pipeline reads from it and writes back exactly one thing: generated
song descriptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection

from tunetide.models.song import Song


# Concrete implementation: SQLiteCatalogProvider (tunetide/providers/catalog/)
class ICatalogProvider(ABC):
    """Contract for catalog reads used by recommendations, search and indexing."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def get_song(self, song_id: int) -> Song | None:
        """Return one song with artist/album joined, or ``None``."""

    @abstractmethod
    async def get_songs(self, song_ids: list[int]) -> list[Song]:
        """Return songs for *song_ids* in the same order, skipping unknown ids."""

    @abstractmethod
    async def list_songs(self) -> list[Song]:
        """Return every song in the catalog, oldest first."""

    @abstractmethod
    async def list_songs_missing_description(self) -> list[Song]:
        """Return songs whose description is null or blank."""

    @abstractmethod
    async def songs_by_artist(
        self,
        artist_id: int,
        exclude_song_ids: Collection[int] = (),
        limit: int = 5,
    ) -> list[Song]:
        """Return the newest songs by *artist_id* not in *exclude_song_ids*."""

    @abstractmethod
    async def songs_by_genre(
        self,
        genre: str,
        exclude_song_ids: Collection[int] = (),
        limit: int = 5,
    ) -> list[Song]:
        """Return the newest songs in *genre* not in *exclude_song_ids*."""

    @abstractmethod
    async def popular_songs(self, limit: int = 20) -> list[tuple[Song, int]]:
        """Return ``(song, total_plays)`` ordered by plays desc, then newest.

        Songs with no plays count as zero and are still eligible.
        """

    @abstractmethod
    async def set_description(self, song_id: int, description: str) -> bool:
        """Persist *description* on the song.  Returns ``False`` if unknown."""

    @abstractmethod
    async def lexical_search(self, query: str, limit: int = 10) -> list[Song]:
        """Full-text search over title/artist/album/genre/description.

        Results are ordered by descending text relevance; songs sharing no
        query term are excluded.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
