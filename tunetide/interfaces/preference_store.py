"""Abstract base class for preference rows and the recommendation cache.

Both tables are owned by this pipeline: preferences are mutated only by the
preference tracker, and the cache only by the recommendation generator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from tunetide.models.preference import PreferenceAxis, UserPreference
from tunetide.models.recommendation import (
    RecommendationCacheEntry,
    RecommendationCandidate,
    RecommendedSong,
    TopArtist,
    TopGenre,
)


# Concrete implementation: SQLitePreferenceStore (tunetide/providers/preferences/)
class IPreferenceStore(ABC):
    """Contract for per-user preference and recommendation-cache persistence."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def increment_preference(
        self,
        user_id: int,
        axis: PreferenceAxis,
        increment: float,
        played_at: datetime | None = None,
    ) -> UserPreference:
        """Upsert the row for ``(user_id, axis)``.

        A new row starts at ``score=increment, play_count=1``; an existing
        row gains ``increment`` (capped at 1.0) and one play.  The conflict
        target of the upsert is scoped to the axis so artist rows and genre
        rows never collide.
        """

    @abstractmethod
    async def get_preference(self, user_id: int, axis: PreferenceAxis) -> UserPreference | None:
        """Return the row for ``(user_id, axis)`` or ``None``."""

    @abstractmethod
    async def top_preferences(self, user_id: int, limit: int = 10) -> list[UserPreference]:
        """Return rows ordered by ``(score DESC, play_count DESC)``."""

    @abstractmethod
    async def top_artists(self, user_id: int, limit: int = 5) -> list[TopArtist]:
        """Return artist-axis rows joined to artist names, best first."""

    @abstractmethod
    async def top_genres(self, user_id: int, limit: int = 5) -> list[TopGenre]:
        """Return genre-axis rows, best first."""

    @abstractmethod
    async def replace_recommendations(
        self,
        user_id: int,
        candidates: list[RecommendationCandidate],
    ) -> int:
        """Atomically replace the user's whole cache with *candidates*.

        Delete and insert happen in one transaction; on failure the previous
        cache is left untouched.  Returns the number of rows written.
        """

    @abstractmethod
    async def get_cache_entries(self, user_id: int) -> list[RecommendationCacheEntry]:
        """Return raw cache rows in rank order (score desc, insertion order)."""

    @abstractmethod
    async def get_recommendations(self, user_id: int, limit: int = 20) -> list[RecommendedSong]:
        """Return cache rows joined to song metadata, score desc then rank."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
