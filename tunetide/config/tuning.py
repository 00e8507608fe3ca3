"""Typed views over the ``recommendation`` and ``indexing`` config sections."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tunetide.utils.errors import ConfigurationError


class RecommendationTuning(BaseModel):
    """Constants that shape preference scoring and recommendation ranking.

    Direct-artist affinity is a stronger signal than genre affinity, so
    ``artist_weight`` must stay above ``genre_weight``.
    """

    model_config = ConfigDict(frozen=True)

    preference_increment: float = Field(default=0.1, gt=0.0, le=1.0)
    max_preferences: int = Field(default=10, ge=1)
    candidates_per_preference: int = Field(default=5, ge=1)
    artist_weight: float = Field(default=0.8, gt=0.0, le=1.0)
    genre_weight: float = Field(default=0.6, gt=0.0, le=1.0)
    cache_size: int = Field(default=20, ge=1)
    popular_score: float = Field(default=0.5, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _artist_outranks_genre(self) -> RecommendationTuning:
        if self.artist_weight <= self.genre_weight:
            raise ValueError(
                f"artist_weight ({self.artist_weight}) must exceed "
                f"genre_weight ({self.genre_weight})"
            )
        return self


class IndexingTuning(BaseModel):
    """Admission control for background indexing and bulk backfill."""

    model_config = ConfigDict(frozen=True)

    backfill_delay_seconds: float = Field(default=0.1, ge=0.0)
    queue_size: int = Field(default=100, ge=1)
    workers: int = Field(default=1, ge=1)


def recommendation_tuning(config: dict[str, Any]) -> RecommendationTuning:
    """Build :class:`RecommendationTuning` from a loaded config dict."""
    try:
        return RecommendationTuning(**config.get("recommendation") or {})
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid recommendation config: {exc}") from exc


def indexing_tuning(config: dict[str, Any]) -> IndexingTuning:
    """Build :class:`IndexingTuning` from a loaded config dict."""
    try:
        return IndexingTuning(**config.get("indexing") or {})
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid indexing config: {exc}") from exc
