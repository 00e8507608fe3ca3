"""Per-user recommendation cache.

The cache is rebuilt from a user's preference rows:

* take the top preferences (score desc, then play count desc);
* for each, pull a handful of the newest songs the user has not played,
  by that artist or in that genre;
* score each song as ``preference.score * weight``, where artist
  affinities weigh more than genre affinities;
* keep the first occurrence of every song, sort by score (stable, so ties
  stay in preference order) and truncate.

Users with no preferences, or whose preferences yield nothing new, get
the most-played songs in the catalog instead.  The whole cache is swapped
atomically, so readers never see a half-built set.
"""

from __future__ import annotations

from tunetide.config.tuning import RecommendationTuning
from tunetide.interfaces.catalog_provider import ICatalogProvider
from tunetide.interfaces.play_history_provider import IPlayHistoryProvider
from tunetide.interfaces.preference_store import IPreferenceStore
from tunetide.models.preference import ArtistAxis, UserPreference
from tunetide.models.recommendation import (
    RecommendationCandidate,
    RecommendedSong,
    TopArtist,
    TopGenre,
)
from tunetide.utils.logging import get_logger

POPULAR_REASON = "Popular songs you might like"


def artist_reason(artist_name: str) -> str:
    return f"Based on your love for {artist_name}"


def genre_reason(genre: str) -> str:
    return f"Based on your love for {genre} music"


def rank_candidates(
    candidates: list[RecommendationCandidate],
    limit: int,
) -> list[RecommendationCandidate]:
    """Drop repeat songs (first one wins), sort by score desc, truncate.

    ``sorted`` is stable, so equal scores keep their generation order.
    """
    seen: set[int] = set()
    unique: list[RecommendationCandidate] = []
    for candidate in candidates:
        if candidate.song_id in seen:
            continue
        seen.add(candidate.song_id)
        unique.append(candidate)
    return sorted(unique, key=lambda c: c.score, reverse=True)[:limit]


class RecommendationService:
    """Builds and serves the per-user recommendation cache.

    Parameters
    ----------
    catalog:
        Source of candidate songs and of the popular-songs fallback.
    play_history:
        Used to exclude songs the user has already played.
    preferences:
        Preference rows and the cache itself.
    tuning:
        Increment, weights and limits; see
        :class:`~tunetide.config.tuning.RecommendationTuning`.
    """

    def __init__(
        self,
        catalog: ICatalogProvider,
        play_history: IPlayHistoryProvider,
        preferences: IPreferenceStore,
        tuning: RecommendationTuning | None = None,
    ) -> None:
        self._catalog = catalog
        self._history = play_history
        self._preferences = preferences
        self._tuning = tuning or RecommendationTuning()
        self._logger = get_logger(__name__)

    @property
    def tuning(self) -> RecommendationTuning:
        return self._tuning

    # ------------------------------------------------------------------
    # Cache builds
    # ------------------------------------------------------------------

    async def generate(self, user_id: int) -> list[RecommendationCandidate]:
        """Rebuild *user_id*'s cache from their preferences and return it."""
        prefs = await self._preferences.top_preferences(user_id, self._tuning.max_preferences)
        if not prefs:
            self._logger.info("recommendations_no_preferences", user_id=user_id)
            return await self.recommend_popular_songs(user_id)

        played = await self._history.played_song_ids(user_id)
        candidates: list[RecommendationCandidate] = []
        for pref in prefs:
            candidates.extend(await self._candidates_for(pref, played))

        ranked = rank_candidates(candidates, self._tuning.cache_size)
        if not ranked:
            self._logger.info(
                "recommendations_no_candidates", user_id=user_id, preferences=len(prefs)
            )
            return await self.recommend_popular_songs(user_id)

        await self._preferences.replace_recommendations(user_id, ranked)
        self._logger.info(
            "recommendations_generated",
            user_id=user_id,
            preferences=len(prefs),
            candidates=len(candidates),
            cached=len(ranked),
        )
        return ranked

    async def regenerate(self, user_id: int) -> list[RecommendationCandidate]:
        """Rebuild on demand (same as :meth:`generate`)."""
        return await self.generate(user_id)

    async def recommend_popular_songs(self, user_id: int) -> list[RecommendationCandidate]:
        """Fill *user_id*'s cache with the catalog's most-played songs."""
        popular = await self._catalog.popular_songs(self._tuning.cache_size)
        candidates = [
            RecommendationCandidate(
                song_id=song.id,
                score=self._tuning.popular_score,
                reason=POPULAR_REASON,
                source="popular",
            )
            for song, _plays in popular
        ]
        await self._preferences.replace_recommendations(user_id, candidates)
        self._logger.info("recommendations_popular", user_id=user_id, cached=len(candidates))
        return candidates

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_recommendations(self, user_id: int, limit: int = 20) -> list[RecommendedSong]:
        return await self._preferences.get_recommendations(user_id, limit)

    async def get_top_artists(self, user_id: int, limit: int = 5) -> list[TopArtist]:
        return await self._preferences.top_artists(user_id, limit)

    async def get_top_genres(self, user_id: int, limit: int = 5) -> list[TopGenre]:
        return await self._preferences.top_genres(user_id, limit)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _candidates_for(
        self,
        pref: UserPreference,
        played: set[int],
    ) -> list[RecommendationCandidate]:
        limit = self._tuning.candidates_per_preference
        if isinstance(pref.axis, ArtistAxis):
            songs = await self._catalog.songs_by_artist(pref.axis.artist_id, played, limit)
            weight = self._tuning.artist_weight
            source = "artist"
            reason = artist_reason(pref.label)
        else:
            songs = await self._catalog.songs_by_genre(pref.axis.genre, played, limit)
            weight = self._tuning.genre_weight
            source = "genre"
            reason = genre_reason(pref.axis.genre)

        return [
            RecommendationCandidate(
                song_id=song.id,
                score=round(pref.score * weight, 4),
                reason=reason,
                source=source,
            )
            for song in songs
        ]
