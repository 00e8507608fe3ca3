"""Unit tests for RecommendationService.

Ranking is tested as a pure function; cache builds run against the real
SQLite stores on a temp database.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from tunetide.config.tuning import RecommendationTuning
from tunetide.interfaces.preference_store import IPreferenceStore
from tunetide.models.preference import ArtistAxis, GenreAxis
from tunetide.models.recommendation import RecommendationCandidate
from tunetide.services.recommendation_service import (
    POPULAR_REASON,
    RecommendationService,
    rank_candidates,
)


def _c(song_id: int, score: float, source: str = "artist") -> RecommendationCandidate:
    return RecommendationCandidate(song_id=song_id, score=score, reason=source, source=source)


class TestRankCandidates:
    def test_first_occurrence_wins(self) -> None:
        ranked = rank_candidates([_c(1, 0.08, "artist"), _c(1, 0.3, "genre")], limit=20)
        assert [(c.song_id, c.score, c.source) for c in ranked] == [(1, 0.08, "artist")]

    def test_sorted_by_score_desc_stable(self) -> None:
        ranked = rank_candidates([_c(1, 0.06), _c(2, 0.08), _c(3, 0.06), _c(4, 0.08)], limit=20)
        assert [c.song_id for c in ranked] == [2, 4, 1, 3]

    def test_truncates_after_sorting(self) -> None:
        ranked = rank_candidates([_c(i, i / 100) for i in range(1, 31)], limit=20)
        assert len(ranked) == 20
        assert ranked[0].song_id == 30
        assert ranked[-1].song_id == 11

    def test_empty(self) -> None:
        assert rank_candidates([], limit=20) == []


@pytest_asyncio.fixture
async def service(catalog, play_history, preferences, rec_tuning) -> RecommendationService:
    return RecommendationService(catalog, play_history, preferences, rec_tuning)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_artist_and_genre_candidates(self, service, preferences, play_history, seeded) -> None:
        s, a = seeded["songs"], seeded["artists"]
        await play_history.record_play(1, s["one_more_time"].id)
        await preferences.increment_preference(1, ArtistAxis(artist_id=a["daft_punk"]), 0.1)
        await preferences.increment_preference(1, GenreAxis(genre="electronic"), 0.1)

        ranked = await service.generate(1)

        assert [(c.song_id, c.score) for c in ranked] == [
            (s["harder"].id, 0.08),
            (s["digital_love"].id, 0.08),
            (s["aerodynamic"].id, 0.08),
            (s["genesis"].id, 0.06),
            (s["dance"].id, 0.06),
        ]
        assert ranked[0].reason == "Based on your love for Daft Punk"
        assert ranked[-1].reason == "Based on your love for electronic music"
        assert s["one_more_time"].id not in {c.song_id for c in ranked}

        cached = await service.get_recommendations(1)
        assert [r.song.id for r in cached] == [c.song_id for c in ranked]

    @pytest.mark.asyncio
    async def test_no_preferences_falls_back_to_popular(self, service, play_history, seeded) -> None:
        await play_history.record_play(99, seeded["songs"]["hello"].id)

        ranked = await service.generate(1)

        assert len(ranked) == 9
        assert ranked[0].song_id == seeded["songs"]["hello"].id
        assert {c.score for c in ranked} == {0.5}
        assert {c.reason for c in ranked} == {POPULAR_REASON}
        assert {c.source for c in ranked} == {"popular"}

    @pytest.mark.asyncio
    async def test_preferences_without_candidates_fall_back(
        self, service, preferences, play_history, seeded
    ) -> None:
        s, a = seeded["songs"], seeded["artists"]
        for key in ("hello", "when_we_were_young"):
            await play_history.record_play(1, s[key].id)
        await preferences.increment_preference(1, ArtistAxis(artist_id=a["adele"]), 0.1)
        await preferences.increment_preference(1, GenreAxis(genre="pop"), 0.1)

        ranked = await service.generate(1)

        assert ranked
        assert all(c.source == "popular" for c in ranked)
        assert len(await service.get_recommendations(1)) == len(ranked)

    @pytest.mark.asyncio
    async def test_generate_is_idempotent(self, service, preferences, seeded) -> None:
        await preferences.increment_preference(1, GenreAxis(genre="electronic"), 0.3)
        first = await service.get_recommendations(1)
        await service.generate(1)
        once = [(r.song.id, r.score) for r in await service.get_recommendations(1)]
        await service.regenerate(1)
        twice = [(r.song.id, r.score) for r in await service.get_recommendations(1)]
        assert first == []
        assert once == twice

    @pytest.mark.asyncio
    async def test_cache_size_and_limits_respected(self, catalog, play_history, preferences, seeded) -> None:
        tuning = RecommendationTuning(cache_size=2, candidates_per_preference=1)
        service = RecommendationService(catalog, play_history, preferences, tuning)
        await preferences.increment_preference(1, GenreAxis(genre="electronic"), 0.2)
        await preferences.increment_preference(1, GenreAxis(genre="pop"), 0.1)
        await preferences.increment_preference(1, ArtistAxis(artist_id=seeded["artists"]["adele"]), 0.1)

        ranked = await service.generate(1)

        # One song per preference; the Adele pick repeats the pop pick and is dropped.
        s = seeded["songs"]
        assert [(c.song_id, c.score) for c in ranked] == [
            (s["genesis"].id, 0.12),
            (s["when_we_were_young"].id, 0.06),
        ]

    @pytest.mark.asyncio
    async def test_only_top_preferences_consulted(self, catalog, play_history, preferences, seeded) -> None:
        tuning = RecommendationTuning(max_preferences=1)
        service = RecommendationService(catalog, play_history, preferences, tuning)
        await preferences.increment_preference(1, GenreAxis(genre="pop"), 0.5)
        await preferences.increment_preference(1, GenreAxis(genre="electronic"), 0.1)

        ranked = await service.generate(1)

        assert {c.reason for c in ranked} == {"Based on your love for pop music"}


class TestProfileViews:
    @pytest.mark.asyncio
    async def test_top_artists_and_genres_delegate(self, service, preferences, seeded) -> None:
        await preferences.increment_preference(1, ArtistAxis(artist_id=seeded["artists"]["justice"]), 0.1)
        await preferences.increment_preference(1, GenreAxis(genre="electronic"), 0.1)
        assert [a.artist_name for a in await service.get_top_artists(1)] == ["Justice"]
        assert [g.genre for g in await service.get_top_genres(1)] == ["electronic"]


@pytest.mark.asyncio
async def test_cache_write_failure_propagates() -> None:
    catalog = MagicMock()
    catalog.popular_songs = AsyncMock(return_value=[])
    history = MagicMock()
    store = MagicMock(spec=IPreferenceStore)
    store.top_preferences = AsyncMock(return_value=[])
    store.replace_recommendations = AsyncMock(side_effect=RuntimeError("disk full"))
    service = RecommendationService(catalog, history, store)

    with pytest.raises(RuntimeError):
        await service.generate(1)
