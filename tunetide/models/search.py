"""Vector-index and search models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tunetide.models.song import Song


class EmbeddingResult(BaseModel):
    """A vector plus where it came from.

    ``fallback`` is ``True`` when the deterministic hash embedding was used
    because the embedding endpoint failed or timed out.
    """

    model_config = ConfigDict(frozen=True)

    vector: list[float]
    provider: str
    fallback: bool = False


class SongEmbeddingRecord(BaseModel):
    """The properties stored alongside a song's vector in the index.

    ``record_id`` is the index-local identifier; ``song_id`` is the durable
    catalog key and is unique across records.
    """

    model_config = ConfigDict(frozen=True)

    song_id: int
    title: str
    artist_name: str
    album_title: str = ""
    genre: str = ""
    description: str = ""
    record_id: str | None = None
    embedding: list[float] | None = None

    @classmethod
    def from_song(cls, song: Song, description: str) -> SongEmbeddingRecord:
        return cls(
            song_id=song.id,
            title=song.title,
            artist_name=song.artist_name,
            album_title=song.album_title or "",
            genre=song.genre or "",
            description=description,
        )


class VectorHit(BaseModel):
    """One nearest-neighbour result, cosine distance (lower is closer)."""

    model_config = ConfigDict(frozen=True)

    song_id: int
    distance: float
    record_id: str | None = None


class SearchResponse(BaseModel):
    """Songs answering a natural-language query.

    ``source`` records which path produced the ranking: ``"vector"`` for
    the semantic index, ``"lexical"`` for the full-text fallback.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    songs: list[Song] = Field(default_factory=list)
    source: Literal["vector", "lexical"]

    @property
    def count(self) -> int:
        return len(self.songs)


class IndexingResult(BaseModel):
    """Outcome of indexing one song."""

    model_config = ConfigDict(frozen=True)

    song_id: int
    record_id: str
    created: bool
    description_generated: bool = False
    embedding_fallback: bool = False


class BackfillReport(BaseModel):
    """Summary of a bulk indexing run."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    indexed: int = 0
    failed: int = 0
    failed_song_ids: list[int] = Field(default_factory=list)
