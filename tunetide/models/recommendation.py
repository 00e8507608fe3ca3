"""Recommendation models.

Recommendations are produced in three stages:

1. :class:`RecommendationCandidate` -- one song proposed by one preference
   row (or by the popular-songs fallback), before deduplication.
2. :class:`RecommendationCacheEntry` -- a persisted row of the per-user
   cache.  The whole set for a user is replaced on every rebuild.
3. :class:`RecommendedSong` -- a cache row joined to its catalog song, as
   returned to readers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tunetide.models.song import Song

CandidateSource = Literal["artist", "genre", "popular"]


class RecommendationCandidate(BaseModel):
    """A scored song suggestion with its provenance."""

    model_config = ConfigDict(frozen=True)

    song_id: int
    score: float = Field(ge=0.0)
    reason: str
    source: CandidateSource


class RecommendationCacheEntry(BaseModel):
    """One row of a user's recommendation cache."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    song_id: int
    score: float
    reason: str
    computed_at: datetime | None = None


class RecommendedSong(BaseModel):
    """A cached recommendation joined with song metadata."""

    model_config = ConfigDict(frozen=True)

    song: Song
    score: float
    reason: str
    computed_at: datetime | None = None


class TopArtist(BaseModel):
    """Artist-axis preference summary for profile views."""

    model_config = ConfigDict(frozen=True)

    artist_id: int
    artist_name: str
    score: float
    play_count: int


class TopGenre(BaseModel):
    """Genre-axis preference summary for profile views."""

    model_config = ConfigDict(frozen=True)

    genre: str
    score: float
    play_count: int
