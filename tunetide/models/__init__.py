"""Pydantic v2 data models for TuneTide (all frozen)."""

from tunetide.models.preference import ArtistAxis, GenreAxis, PreferenceAxis, UserPreference
from tunetide.models.recommendation import (
    CandidateSource,
    RecommendationCacheEntry,
    RecommendationCandidate,
    RecommendedSong,
    TopArtist,
    TopGenre,
)
from tunetide.models.search import (
    BackfillReport,
    EmbeddingResult,
    IndexingResult,
    SearchResponse,
    SongEmbeddingRecord,
    VectorHit,
)
from tunetide.models.song import PlayRecord, Song

__all__ = [
    "ArtistAxis",
    "BackfillReport",
    "CandidateSource",
    "EmbeddingResult",
    "GenreAxis",
    "IndexingResult",
    "PlayRecord",
    "PreferenceAxis",
    "RecommendationCacheEntry",
    "RecommendationCandidate",
    "RecommendedSong",
    "SearchResponse",
    "Song",
    "SongEmbeddingRecord",
    "TopArtist",
    "TopGenre",
    "UserPreference",
    "VectorHit",
]
