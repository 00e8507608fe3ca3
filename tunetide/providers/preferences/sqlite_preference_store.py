"""SQLite-backed preference rows and recommendation cache.

Preference rows are upserted with ``INSERT ... ON CONFLICT`` against the
partial unique indexes ``uq_pref_artist`` / ``uq_pref_genre``, so the
read-modify-write of a score happens inside a single statement and two
concurrent plays cannot lose an increment.

The recommendation cache is replaced wholesale per user inside one
transaction; readers see either the previous set or the new one.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import aiosqlite
import structlog

from tunetide.interfaces.preference_store import IPreferenceStore
from tunetide.models.preference import ArtistAxis, GenreAxis, PreferenceAxis, UserPreference
from tunetide.models.recommendation import (
    RecommendationCacheEntry,
    RecommendationCandidate,
    RecommendedSong,
    TopArtist,
    TopGenre,
)
from tunetide.providers.sqlite_schema import SONG_SELECT_SQL, ensure_schema, song_from_row

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/tunetide.db")

_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"

_UPSERT_ARTIST_SQL = f"""\
INSERT INTO user_preferences (user_id, artist_id, genre, score, play_count, last_played_at)
VALUES (:user_id, :artist_id, NULL, ROUND(MIN(:increment, 1.0), 4), 1, COALESCE(:played_at, {_NOW}))
ON CONFLICT(user_id, artist_id) WHERE genre IS NULL DO UPDATE SET
    score          = ROUND(MIN(user_preferences.score + :increment, 1.0), 4),
    play_count     = user_preferences.play_count + 1,
    last_played_at = excluded.last_played_at,
    updated_at     = {_NOW};
"""

_UPSERT_GENRE_SQL = f"""\
INSERT INTO user_preferences (user_id, artist_id, genre, score, play_count, last_played_at)
VALUES (:user_id, NULL, :genre, ROUND(MIN(:increment, 1.0), 4), 1, COALESCE(:played_at, {_NOW}))
ON CONFLICT(user_id, genre) WHERE artist_id IS NULL DO UPDATE SET
    score          = ROUND(MIN(user_preferences.score + :increment, 1.0), 4),
    play_count     = user_preferences.play_count + 1,
    last_played_at = excluded.last_played_at,
    updated_at     = {_NOW};
"""

_PREF_COLUMNS = """\
SELECT up.user_id, up.artist_id, up.genre, up.score, up.play_count,
       up.last_played_at, ar.name AS artist_name
FROM user_preferences up
LEFT JOIN artists ar ON up.artist_id = ar.id
"""

_SELECT_ARTIST_PREF_SQL = _PREF_COLUMNS + (
    "WHERE up.user_id = ? AND up.artist_id = ? AND up.genre IS NULL;"
)

_SELECT_GENRE_PREF_SQL = _PREF_COLUMNS + (
    "WHERE up.user_id = ? AND up.genre = ? AND up.artist_id IS NULL;"
)

_SELECT_TOP_PREFS_SQL = _PREF_COLUMNS + (
    "WHERE up.user_id = ? ORDER BY up.score DESC, up.play_count DESC, up.id ASC LIMIT ?;"
)

_SELECT_TOP_ARTISTS_SQL = """\
SELECT up.artist_id, ar.name AS artist_name, up.score, up.play_count
FROM user_preferences up
JOIN artists ar ON up.artist_id = ar.id
WHERE up.user_id = ? AND up.artist_id IS NOT NULL
ORDER BY up.score DESC, up.play_count DESC, up.id ASC
LIMIT ?;
"""

_SELECT_TOP_GENRES_SQL = """\
SELECT genre, score, play_count
FROM user_preferences
WHERE user_id = ? AND genre IS NOT NULL
ORDER BY score DESC, play_count DESC, id ASC
LIMIT ?;
"""

_DELETE_CACHE_SQL = "DELETE FROM recommendation_cache WHERE user_id = ?;"

_INSERT_CACHE_SQL = """\
INSERT INTO recommendation_cache (user_id, song_id, score, reason, rank)
VALUES (?, ?, ?, ?, ?);
"""

_SELECT_CACHE_SQL = """\
SELECT user_id, song_id, score, reason, created_at
FROM recommendation_cache
WHERE user_id = ?
ORDER BY score DESC, rank ASC;
"""

# Rows of one cache all come from the same rebuild, so rank (insertion
# order) is what separates equal scores.
_SELECT_RECOMMENDATIONS_SQL = (
    SONG_SELECT_SQL.replace(
        "SELECT s.id,",
        "SELECT rc.score AS rec_score, rc.reason AS rec_reason, rc.created_at AS rec_created_at,\n"
        "       s.id,",
        1,
    )
    + "JOIN recommendation_cache rc ON rc.song_id = s.id\n"
    + "WHERE rc.user_id = ?\n"
    + "ORDER BY rc.score DESC, rc.rank ASC\n"
    + "LIMIT ?;"
)


def _preference_from_row(row: aiosqlite.Row) -> UserPreference:
    if row["artist_id"] is not None:
        axis: PreferenceAxis = ArtistAxis(artist_id=row["artist_id"])
    else:
        axis = GenreAxis(genre=row["genre"])
    return UserPreference(
        user_id=row["user_id"],
        axis=axis,
        score=row["score"],
        play_count=row["play_count"],
        last_played_at=row["last_played_at"],
        artist_name=row["artist_name"],
    )


class SQLitePreferenceStore(IPreferenceStore):
    """Preference rows and recommendation cache in SQLite."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        await ensure_schema(self._db_path)
        logger.info("preference_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Preference rows
    # ------------------------------------------------------------------

    async def increment_preference(
        self,
        user_id: int,
        axis: PreferenceAxis,
        increment: float,
        played_at: datetime | None = None,
    ) -> UserPreference:
        params = {
            "user_id": user_id,
            "increment": increment,
            "played_at": played_at.isoformat() if played_at else None,
        }
        if isinstance(axis, ArtistAxis):
            sql = _UPSERT_ARTIST_SQL
            params["artist_id"] = axis.artist_id
        else:
            sql = _UPSERT_GENRE_SQL
            params["genre"] = axis.genre

        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(sql, params)
            await db.commit()

        pref = await self.get_preference(user_id, axis)
        if pref is None:
            # Only reachable if the row was deleted between upsert and read.
            raise LookupError(f"Preference for user {user_id} on {axis!r} disappeared")

        logger.debug(
            "preference_incremented",
            user_id=user_id,
            axis=axis.kind,
            label=pref.label,
            score=pref.score,
            play_count=pref.play_count,
        )
        return pref

    async def get_preference(self, user_id: int, axis: PreferenceAxis) -> UserPreference | None:
        if isinstance(axis, ArtistAxis):
            sql, key = _SELECT_ARTIST_PREF_SQL, axis.artist_id
        else:
            sql, key = _SELECT_GENRE_PREF_SQL, axis.genre
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, (user_id, key))
            row = await cursor.fetchone()
        return _preference_from_row(row) if row else None

    async def top_preferences(self, user_id: int, limit: int = 10) -> list[UserPreference]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_TOP_PREFS_SQL, (user_id, limit))
            rows = await cursor.fetchall()
        return [_preference_from_row(r) for r in rows]

    async def top_artists(self, user_id: int, limit: int = 5) -> list[TopArtist]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_TOP_ARTISTS_SQL, (user_id, limit))
            rows = await cursor.fetchall()
        return [
            TopArtist(
                artist_id=r["artist_id"],
                artist_name=r["artist_name"],
                score=r["score"],
                play_count=r["play_count"],
            )
            for r in rows
        ]

    async def top_genres(self, user_id: int, limit: int = 5) -> list[TopGenre]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_TOP_GENRES_SQL, (user_id, limit))
            rows = await cursor.fetchall()
        return [
            TopGenre(genre=r["genre"], score=r["score"], play_count=r["play_count"]) for r in rows
        ]

    # ------------------------------------------------------------------
    # Recommendation cache
    # ------------------------------------------------------------------

    async def replace_recommendations(
        self,
        user_id: int,
        candidates: list[RecommendationCandidate],
    ) -> int:
        rows = [
            (user_id, c.song_id, round(c.score, 4), c.reason, rank)
            for rank, c in enumerate(candidates)
        ]
        async with aiosqlite.connect(str(self._db_path)) as db:
            try:
                await db.execute(_DELETE_CACHE_SQL, (user_id,))
                if rows:
                    await db.executemany(_INSERT_CACHE_SQL, rows)
                await db.commit()
            except aiosqlite.Error:
                await db.rollback()
                logger.error("recommendation_cache_replace_failed", user_id=user_id, exc_info=True)
                raise

        logger.info("recommendation_cache_replaced", user_id=user_id, rows=len(rows))
        return len(rows)

    async def get_cache_entries(self, user_id: int) -> list[RecommendationCacheEntry]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_CACHE_SQL, (user_id,))
            rows = await cursor.fetchall()
        return [
            RecommendationCacheEntry(
                user_id=r["user_id"],
                song_id=r["song_id"],
                score=r["score"],
                reason=r["reason"],
                computed_at=r["created_at"],
            )
            for r in rows
        ]

    async def get_recommendations(self, user_id: int, limit: int = 20) -> list[RecommendedSong]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_RECOMMENDATIONS_SQL, (user_id, limit))
            rows = await cursor.fetchall()
        return [
            RecommendedSong(
                song=song_from_row(r),
                score=r["rec_score"],
                reason=r["rec_reason"],
                computed_at=r["rec_created_at"],
            )
            for r in rows
        ]

    def get_provider_name(self) -> str:
        return "sqlite_preferences"
