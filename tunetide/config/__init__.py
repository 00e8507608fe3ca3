"""Configuration module -- exports Settings, load_config, and the tuning models."""

from tunetide.config.loader import load_config
from tunetide.config.settings import Settings
from tunetide.config.tuning import (
    IndexingTuning,
    RecommendationTuning,
    indexing_tuning,
    recommendation_tuning,
)

__all__ = [
    "IndexingTuning",
    "RecommendationTuning",
    "Settings",
    "indexing_tuning",
    "load_config",
    "recommendation_tuning",
]
