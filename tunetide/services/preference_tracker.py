"""Play events to preferences.

Every play nudges two affinities upward: one for the song's artist and,
if the song has a genre, one for that genre.  The recommendation cache is
then rebuilt so the next read reflects the play.

Plays for the same user are processed one at a time; otherwise a rebuild
could read preferences from before a concurrent increment and commit
after it.
"""

from __future__ import annotations

import asyncio
import weakref
from datetime import datetime, timezone

from tunetide.interfaces.catalog_provider import ICatalogProvider
from tunetide.interfaces.play_history_provider import IPlayHistoryProvider
from tunetide.interfaces.preference_store import IPreferenceStore
from tunetide.models.preference import ArtistAxis, GenreAxis, UserPreference
from tunetide.models.song import PlayRecord
from tunetide.services.recommendation_service import RecommendationService
from tunetide.utils.logging import get_logger


class PreferenceTracker:
    """Turns a play of a song into preference increments plus a cache rebuild."""

    def __init__(
        self,
        catalog: ICatalogProvider,
        preferences: IPreferenceStore,
        recommendations: RecommendationService,
    ) -> None:
        self._catalog = catalog
        self._preferences = preferences
        self._recommendations = recommendations
        self._user_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._logger = get_logger(__name__)

    async def update_preferences(
        self,
        user_id: int,
        song_id: int,
        played_at: datetime | None = None,
    ) -> list[UserPreference]:
        """Bump the artist (and genre) preference for a play of *song_id*.

        An unknown song is a no-op and returns an empty list.
        """
        song = await self._catalog.get_song(song_id)
        if song is None:
            self._logger.warning("preference_unknown_song", user_id=user_id, song_id=song_id)
            return []

        played_at = played_at or datetime.now(timezone.utc)
        increment = self._recommendations.tuning.preference_increment

        async with self._lock_for(user_id):
            updated = [
                await self._preferences.increment_preference(
                    user_id, ArtistAxis(artist_id=song.artist_id), increment, played_at
                )
            ]
            genre = song.genre
            if genre and genre.strip():
                updated.append(
                    await self._preferences.increment_preference(
                        user_id, GenreAxis(genre=genre), increment, played_at
                    )
                )
            await self._recommendations.generate(user_id)

        self._logger.info(
            "preferences_updated",
            user_id=user_id,
            song_id=song_id,
            axes=[p.axis.kind for p in updated],
        )
        return updated

    def _lock_for(self, user_id: int) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock


class PlayTracker:
    """Entry point for a play event: history first, then preferences."""

    def __init__(
        self,
        catalog: ICatalogProvider,
        play_history: IPlayHistoryProvider,
        tracker: PreferenceTracker,
    ) -> None:
        self._catalog = catalog
        self._history = play_history
        self._tracker = tracker
        self._logger = get_logger(__name__)

    async def record_play(self, user_id: int, song_id: int) -> PlayRecord | None:
        """Append a play and update preferences.

        Returns ``None``, writing nothing, for an unknown song.
        """
        song = await self._catalog.get_song(song_id)
        if song is None:
            self._logger.warning("play_unknown_song", user_id=user_id, song_id=song_id)
            return None
        record = await self._history.record_play(user_id, song_id)
        await self._tracker.update_preferences(user_id, song_id, played_at=record.played_at)
        return record
