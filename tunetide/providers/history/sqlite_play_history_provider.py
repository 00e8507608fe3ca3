"""SQLite-backed play history.

Append-only: one row per play event.  The recommendation generator reads it
to exclude songs a user has already heard.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite
import structlog

from tunetide.interfaces.play_history_provider import IPlayHistoryProvider
from tunetide.models.song import PlayRecord
from tunetide.providers.sqlite_schema import ensure_schema

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/tunetide.db")

_INSERT_PLAY_SQL = "INSERT INTO play_history (user_id, song_id) VALUES (?, ?);"

_SELECT_PLAY_SQL = "SELECT id, user_id, song_id, played_at FROM play_history WHERE id = ?;"

_SELECT_PLAYED_IDS_SQL = "SELECT DISTINCT song_id FROM play_history WHERE user_id = ?;"

_COUNT_PLAYS_SQL = "SELECT COUNT(*) FROM play_history WHERE user_id = ?;"


class SQLitePlayHistoryProvider(IPlayHistoryProvider):
    """Append-only play log stored in SQLite."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        await ensure_schema(self._db_path)
        logger.info("play_history_db_initialized", path=str(self._db_path))

    async def record_play(self, user_id: int, song_id: int) -> PlayRecord:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_INSERT_PLAY_SQL, (user_id, song_id))
            await db.commit()
            cursor = await db.execute(_SELECT_PLAY_SQL, (cursor.lastrowid,))
            row = await cursor.fetchone()

        logger.info("play_recorded", user_id=user_id, song_id=song_id, play_id=row["id"])
        return PlayRecord(
            id=row["id"],
            user_id=row["user_id"],
            song_id=row["song_id"],
            played_at=row["played_at"],
        )

    async def played_song_ids(self, user_id: int) -> set[int]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_SELECT_PLAYED_IDS_SQL, (user_id,))
            rows = await cursor.fetchall()
        return {row[0] for row in rows}

    async def play_count(self, user_id: int) -> int:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_COUNT_PLAYS_SQL, (user_id,))
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    def get_provider_name(self) -> str:
        return "sqlite_play_history"
