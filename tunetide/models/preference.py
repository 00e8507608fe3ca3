"""User preference models.

A preference row sits on exactly one axis: an artist or a genre.  The axis
is a tagged union (:data:`PreferenceAxis`) so a row that names both, or
neither, cannot be constructed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ArtistAxis(BaseModel):
    """Preference keyed by a specific artist."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["artist"] = "artist"
    artist_id: int


class GenreAxis(BaseModel):
    """Preference keyed by a genre name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["genre"] = "genre"
    genre: str = Field(min_length=1)


PreferenceAxis = Annotated[Union[ArtistAxis, GenreAxis], Field(discriminator="kind")]


class UserPreference(BaseModel):
    """Accumulated affinity of one user for one artist or genre.

    ``score`` grows by a fixed increment per play and is capped at 1.0;
    nothing in the pipeline lowers it.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    axis: PreferenceAxis
    score: float = Field(ge=0.0, le=1.0)
    play_count: int = Field(ge=0)
    last_played_at: datetime | None = None
    # Resolved for artist-axis rows so reasons and top-artist views can show it.
    artist_name: str | None = None

    @property
    def label(self) -> str:
        """Human-readable name of the preferred artist or genre."""
        if isinstance(self.axis, ArtistAxis):
            return self.artist_name or f"artist #{self.axis.artist_id}"
        return self.axis.genre
