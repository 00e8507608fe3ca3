"""SQLite-backed song catalog.

Reads songs with their artist/album joined, serves candidate queries for the
recommendation generator, persists generated descriptions, and answers the
lexical fallback of natural-language search.  Uses ``aiosqlite`` for async
I/O and ``rank_bm25`` for text-relevance ranking.
"""

from __future__ import annotations

import json
from collections.abc import Collection
from pathlib import Path

import aiosqlite
import structlog
from rank_bm25 import BM25Plus

from tunetide.interfaces.catalog_provider import ICatalogProvider
from tunetide.models.song import Song
from tunetide.providers.sqlite_schema import SONG_SELECT_SQL, ensure_schema, song_from_row
from tunetide.utils.errors import CatalogError
from tunetide.utils.text import build_song_text, tokenize

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/tunetide.db")

# Newest first; id breaks ties between songs created in the same millisecond.
_NEWEST_FIRST = "ORDER BY s.created_at DESC, s.id DESC"

_SELECT_BY_ID_SQL = SONG_SELECT_SQL + "WHERE s.id = ?;"

_SELECT_BY_IDS_SQL = SONG_SELECT_SQL + "WHERE s.id IN (SELECT value FROM json_each(?));"

_SELECT_ALL_SQL = SONG_SELECT_SQL + "ORDER BY s.created_at ASC, s.id ASC;"

_SELECT_MISSING_DESCRIPTION_SQL = (
    SONG_SELECT_SQL
    + "WHERE s.description IS NULL OR TRIM(s.description) = '' "
    + "ORDER BY s.created_at ASC, s.id ASC;"
)

_SELECT_BY_ARTIST_SQL = (
    SONG_SELECT_SQL
    + "WHERE s.artist_id = ? AND s.id NOT IN (SELECT value FROM json_each(?)) "
    + _NEWEST_FIRST
    + " LIMIT ?;"
)

_SELECT_BY_GENRE_SQL = (
    SONG_SELECT_SQL
    + "WHERE s.genre = ? AND s.id NOT IN (SELECT value FROM json_each(?)) "
    + _NEWEST_FIRST
    + " LIMIT ?;"
)

_SELECT_POPULAR_SQL = """\
SELECT s.id, s.title, s.artist_id, ar.name AS artist_name,
       s.album_id, al.title AS album_title, al.artwork_url,
       s.genre, s.description, s.duration, s.created_at,
       COUNT(ph.id) AS total_plays
FROM songs s
JOIN artists ar ON s.artist_id = ar.id
LEFT JOIN albums al ON s.album_id = al.id
LEFT JOIN play_history ph ON ph.song_id = s.id
GROUP BY s.id
ORDER BY total_plays DESC, s.created_at DESC, s.id DESC
LIMIT ?;
"""

_UPDATE_DESCRIPTION_SQL = "UPDATE songs SET description = ? WHERE id = ?;"


class SQLiteCatalogProvider(ICatalogProvider):
    """SQLite-backed catalog of songs, artists and albums."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        await ensure_schema(self._db_path)
        logger.info("catalog_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Catalog writes (seeding / admin tooling)
    # ------------------------------------------------------------------

    async def add_artist(self, name: str) -> int:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute("INSERT INTO artists (name) VALUES (?);", (name,))
            await db.commit()
            return cursor.lastrowid

    async def add_album(self, title: str, artist_id: int, artwork_url: str | None = None) -> int:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "INSERT INTO albums (title, artist_id, artwork_url) VALUES (?, ?, ?);",
                (title, artist_id, artwork_url),
            )
            await db.commit()
            return cursor.lastrowid

    async def add_song(
        self,
        title: str,
        artist_id: int,
        album_id: int | None = None,
        genre: str | None = None,
        description: str | None = None,
        duration: int | None = None,
    ) -> Song:
        """Insert a song and return it with its joins resolved."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "INSERT INTO songs (title, artist_id, album_id, genre, description, duration) "
                "VALUES (?, ?, ?, ?, ?, ?);",
                (title, artist_id, album_id, genre, description, duration),
            )
            await db.commit()
            song_id = cursor.lastrowid
        song = await self.get_song(song_id)
        if song is None:
            raise CatalogError(
                message=f"Song {song_id} vanished after insert (unknown artist {artist_id}?)",
                provider_name=self.get_provider_name(),
            )
        return song

    # ------------------------------------------------------------------
    # ICatalogProvider implementation
    # ------------------------------------------------------------------

    async def get_song(self, song_id: int) -> Song | None:
        rows = await self._fetch(_SELECT_BY_ID_SQL, (song_id,))
        return song_from_row(rows[0]) if rows else None

    async def get_songs(self, song_ids: list[int]) -> list[Song]:
        if not song_ids:
            return []
        rows = await self._fetch(_SELECT_BY_IDS_SQL, (json.dumps(list(song_ids)),))
        by_id = {row["id"]: song_from_row(row) for row in rows}
        ordered: list[Song] = []
        seen: set[int] = set()
        for song_id in song_ids:
            song = by_id.get(song_id)
            if song is not None and song_id not in seen:
                ordered.append(song)
                seen.add(song_id)
        return ordered

    async def list_songs(self) -> list[Song]:
        rows = await self._fetch(_SELECT_ALL_SQL)
        return [song_from_row(r) for r in rows]

    async def list_songs_missing_description(self) -> list[Song]:
        rows = await self._fetch(_SELECT_MISSING_DESCRIPTION_SQL)
        return [song_from_row(r) for r in rows]

    async def songs_by_artist(
        self,
        artist_id: int,
        exclude_song_ids: Collection[int] = (),
        limit: int = 5,
    ) -> list[Song]:
        rows = await self._fetch(
            _SELECT_BY_ARTIST_SQL,
            (artist_id, json.dumps(sorted(exclude_song_ids)), limit),
        )
        return [song_from_row(r) for r in rows]

    async def songs_by_genre(
        self,
        genre: str,
        exclude_song_ids: Collection[int] = (),
        limit: int = 5,
    ) -> list[Song]:
        rows = await self._fetch(
            _SELECT_BY_GENRE_SQL,
            (genre, json.dumps(sorted(exclude_song_ids)), limit),
        )
        return [song_from_row(r) for r in rows]

    async def popular_songs(self, limit: int = 20) -> list[tuple[Song, int]]:
        rows = await self._fetch(_SELECT_POPULAR_SQL, (limit,))
        return [(song_from_row(r), int(r["total_plays"])) for r in rows]

    async def set_description(self, song_id: int, description: str) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_UPDATE_DESCRIPTION_SQL, (description, song_id))
            await db.commit()
            updated = cursor.rowcount > 0
        logger.info("song_description_saved", song_id=song_id, updated=updated)
        return updated

    async def lexical_search(self, query: str, limit: int = 10) -> list[Song]:
        """Rank songs against *query* with BM25 over the concatenated fields.

        BM25+ is used rather than plain Okapi BM25 because Okapi's IDF goes
        to zero (or negative) on small catalogs where a term appears in half
        the documents.  Songs sharing no query token are dropped before
        ranking, since BM25+ gives every document a positive floor score.
        """
        query_tokens = tokenize(query)
        if not query_tokens or limit < 1:
            return []

        try:
            songs = await self.list_songs()
        except aiosqlite.Error as exc:
            raise CatalogError(
                message=f"Lexical search failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not songs:
            return []

        corpus = [
            tokenize(build_song_text(s.title, s.artist_name, s.album_title, s.genre, s.description))
            for s in songs
        ]
        if not any(corpus):
            return []

        scores = BM25Plus(corpus).get_scores(query_tokens)
        wanted = set(query_tokens)
        matches = [
            (float(scores[i]), song)
            for i, song in enumerate(songs)
            if wanted.intersection(corpus[i])
        ]
        # Stable sort keeps catalog order (oldest first) among equal scores.
        matches.sort(key=lambda pair: pair[0], reverse=True)

        logger.info(
            "catalog_lexical_search",
            query_tokens=len(query_tokens),
            candidates=len(songs),
            matches=len(matches),
        )
        return [song for _, song in matches[:limit]]

    def get_provider_name(self) -> str:
        return "sqlite_catalog"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _fetch(self, sql: str, params: tuple = ()) -> list[aiosqlite.Row]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, params)
            return list(await cursor.fetchall())
