"""Shared SQLite schema for the relational stores.

Catalog, play history, preferences and the recommendation cache live in one
database file so candidate queries can join across them.  Every SQLite
provider calls :func:`ensure_schema` from its ``initialize()``; the DDL is
idempotent.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiosqlite

from tunetide.models.song import Song

_NOW = "(strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))"

_CREATE_TABLES_SQL = [
    f"""\
CREATE TABLE IF NOT EXISTS artists (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT {_NOW}
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS albums (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT    NOT NULL,
    artist_id   INTEGER NOT NULL REFERENCES artists(id) ON DELETE CASCADE,
    artwork_url TEXT,
    created_at  TEXT    NOT NULL DEFAULT {_NOW}
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS songs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT    NOT NULL,
    artist_id   INTEGER NOT NULL REFERENCES artists(id) ON DELETE CASCADE,
    album_id    INTEGER REFERENCES albums(id) ON DELETE SET NULL,
    genre       TEXT,
    description TEXT,
    duration    INTEGER,
    created_at  TEXT    NOT NULL DEFAULT {_NOW}
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS play_history (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     INTEGER NOT NULL,
    song_id     INTEGER NOT NULL REFERENCES songs(id) ON DELETE CASCADE,
    played_at   TEXT    NOT NULL DEFAULT {_NOW}
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS user_preferences (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id         INTEGER NOT NULL,
    artist_id       INTEGER REFERENCES artists(id) ON DELETE CASCADE,
    genre           TEXT,
    score           REAL    NOT NULL DEFAULT 0.0,
    play_count      INTEGER NOT NULL DEFAULT 0,
    last_played_at  TEXT    NOT NULL DEFAULT {_NOW},
    created_at      TEXT    NOT NULL DEFAULT {_NOW},
    updated_at      TEXT    NOT NULL DEFAULT {_NOW},
    CHECK (
        (artist_id IS NOT NULL AND genre IS NULL) OR
        (artist_id IS NULL AND genre IS NOT NULL)
    ),
    CHECK (score >= 0.0 AND score <= 1.0)
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS recommendation_cache (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     INTEGER NOT NULL,
    song_id     INTEGER NOT NULL REFERENCES songs(id) ON DELETE CASCADE,
    score       REAL    NOT NULL,
    reason      TEXT    NOT NULL,
    rank        INTEGER NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT {_NOW},
    UNIQUE(user_id, song_id)
);
""",
]

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_songs_artist ON songs(artist_id);",
    "CREATE INDEX IF NOT EXISTS idx_songs_genre ON songs(genre);",
    "CREATE INDEX IF NOT EXISTS idx_play_history_user ON play_history(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_play_history_song ON play_history(song_id);",
    # One row per axis: partial unique indexes double as upsert conflict targets.
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_pref_artist "
    "ON user_preferences(user_id, artist_id) WHERE genre IS NULL;",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_pref_genre "
    "ON user_preferences(user_id, genre) WHERE artist_id IS NULL;",
    "CREATE INDEX IF NOT EXISTS idx_rec_cache_user ON recommendation_cache(user_id);",
]

# Every catalog read returns this column set (song + artist name + album).
SONG_SELECT_SQL = """\
SELECT s.id, s.title, s.artist_id, ar.name AS artist_name,
       s.album_id, al.title AS album_title, al.artwork_url,
       s.genre, s.description, s.duration, s.created_at
FROM songs s
JOIN artists ar ON s.artist_id = ar.id
LEFT JOIN albums al ON s.album_id = al.id
"""


async def ensure_schema(db_path: str | Path) -> None:
    """Create every table and index if missing, and switch to WAL mode.

    WAL lets readers keep seeing the last committed cache while a rebuild
    transaction is in flight.
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(str(path)) as db:
        await db.execute("PRAGMA journal_mode=WAL;")
        for table_sql in _CREATE_TABLES_SQL:
            await db.execute(table_sql)
        for idx_sql in _CREATE_INDICES_SQL:
            await db.execute(idx_sql)
        await db.commit()


def song_from_row(row: aiosqlite.Row | dict[str, Any]) -> Song:
    """Build a :class:`Song` from a row selected with ``SONG_SELECT_SQL``."""
    r = dict(row)
    return Song(
        id=r["id"],
        title=r["title"],
        artist_id=r["artist_id"],
        artist_name=r["artist_name"],
        album_id=r.get("album_id"),
        album_title=r.get("album_title"),
        genre=r.get("genre"),
        description=r.get("description"),
        artwork_url=r.get("artwork_url"),
        duration=r.get("duration"),
        created_at=r.get("created_at"),
    )
