"""Play-history provider implementations."""

from tunetide.providers.history.sqlite_play_history_provider import SQLitePlayHistoryProvider

__all__ = ["SQLitePlayHistoryProvider"]
