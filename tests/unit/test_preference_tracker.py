"""Unit tests for PreferenceTracker and PlayTracker."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from tunetide.models.preference import ArtistAxis, GenreAxis
from tunetide.services.preference_tracker import PlayTracker, PreferenceTracker
from tunetide.services.recommendation_service import RecommendationService


@pytest_asyncio.fixture
async def recommendations(catalog, play_history, preferences, rec_tuning) -> RecommendationService:
    return RecommendationService(catalog, play_history, preferences, rec_tuning)


@pytest_asyncio.fixture
async def tracker(catalog, preferences, recommendations) -> PreferenceTracker:
    return PreferenceTracker(catalog, preferences, recommendations)


@pytest_asyncio.fixture
async def play_tracker(catalog, play_history, tracker) -> PlayTracker:
    return PlayTracker(catalog, play_history, tracker)


class TestUpdatePreferences:
    @pytest.mark.asyncio
    async def test_updates_artist_and_genre(self, tracker, preferences, seeded) -> None:
        song = seeded["songs"]["hello"]
        updated = await tracker.update_preferences(1, song.id)

        assert [p.axis for p in updated] == [
            ArtistAxis(artist_id=song.artist_id),
            GenreAxis(genre="pop"),
        ]
        assert all(p.score == pytest.approx(0.1) for p in updated)

    @pytest.mark.asyncio
    async def test_song_without_genre_updates_artist_only(self, tracker, preferences, seeded) -> None:
        updated = await tracker.update_preferences(1, seeded["songs"]["untagged"].id)
        assert [p.axis.kind for p in updated] == ["artist"]
        assert await preferences.top_genres(1) == []

    @pytest.mark.asyncio
    async def test_unknown_song_is_noop(self, tracker, preferences, seeded) -> None:
        assert await tracker.update_preferences(1, 99999) == []
        assert await preferences.top_preferences(1) == []
        assert await preferences.get_cache_entries(1) == []

    @pytest.mark.asyncio
    async def test_regenerates_recommendations(self, tracker, preferences, seeded) -> None:
        await tracker.update_preferences(1, seeded["songs"]["hello"].id)
        entries = await preferences.get_cache_entries(1)
        assert entries
        assert entries[0].reason == "Based on your love for Adele"

    @pytest.mark.asyncio
    async def test_concurrent_plays_for_one_user(self, tracker, preferences, seeded) -> None:
        song_id = seeded["songs"]["genesis"].id
        await asyncio.gather(*(tracker.update_preferences(1, song_id) for _ in range(4)))
        pref = await preferences.get_preference(1, GenreAxis(genre="electronic"))
        assert pref.play_count == 4
        assert pref.score == pytest.approx(0.4)

    @pytest.mark.asyncio
    async def test_generation_failure_propagates(self, catalog, preferences, recommendations, seeded) -> None:
        recommendations.generate = AsyncMock(side_effect=RuntimeError("cache write failed"))
        tracker = PreferenceTracker(catalog, preferences, recommendations)
        with pytest.raises(RuntimeError):
            await tracker.update_preferences(1, seeded["songs"]["hello"].id)
        # The increments committed before the rebuild was attempted.
        assert len(await preferences.top_preferences(1)) == 2


class TestPlayTracker:
    @pytest.mark.asyncio
    async def test_record_play_end_to_end(self, play_tracker, play_history, preferences, seeded) -> None:
        song = seeded["songs"]["one_more_time"]

        record = await play_tracker.record_play(1, song.id)

        assert record.song_id == song.id
        assert await play_history.played_song_ids(1) == {song.id}
        cached = {e.song_id for e in await preferences.get_cache_entries(1)}
        assert song.id not in cached
        assert seeded["songs"]["harder"].id in cached

    @pytest.mark.asyncio
    async def test_unknown_song_records_nothing(self, play_tracker, play_history, seeded) -> None:
        assert await play_tracker.record_play(1, 99999) is None
        assert await play_history.play_count(1) == 0
