"""Catalog song model.

A :class:`Song` is the catalog row joined with its artist name and
(optional) album title -- the shape every catalog read returns.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Song(BaseModel):
    """A catalog song with its artist/album join already resolved."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    artist_id: int
    artist_name: str
    album_id: int | None = None
    album_title: str | None = None
    genre: str | None = None
    # Text fed to the embedding model; generated when missing.
    description: str | None = None
    artwork_url: str | None = None
    duration: int | None = Field(default=None, ge=0, description="Length in seconds.")
    created_at: datetime | None = None

    @property
    def has_description(self) -> bool:
        return bool(self.description and self.description.strip())


class PlayRecord(BaseModel):
    """One appended row of a user's play history."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    song_id: int
    played_at: datetime
