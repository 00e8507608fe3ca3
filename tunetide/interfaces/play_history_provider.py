"""Abstract base class for play-history persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tunetide.models.song import PlayRecord


# Concrete implementation: SQLitePlayHistoryProvider (tunetide/providers/history/)
class IPlayHistoryProvider(ABC):
    """Contract for the append-only log of song plays."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def record_play(self, user_id: int, song_id: int) -> PlayRecord:
        """Append one play event and return the stored row."""

    @abstractmethod
    async def played_song_ids(self, user_id: int) -> set[int]:
        """Return the ids of every song *user_id* has played."""

    @abstractmethod
    async def play_count(self, user_id: int) -> int:
        """Return how many plays *user_id* has recorded."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
