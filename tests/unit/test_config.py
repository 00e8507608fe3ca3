"""Unit tests for settings, the YAML loader and tuning validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from tunetide.config.loader import _deep_merge, load_config
from tunetide.config.settings import Settings
from tunetide.config.tuning import (
    IndexingTuning,
    RecommendationTuning,
    indexing_tuning,
    recommendation_tuning,
)
from tunetide.utils.errors import ConfigurationError


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("EMBEDDING_DIMENSION", raising=False)
        settings = Settings(_env_file=None)
        assert settings.embedding_dimension == 1024
        assert settings.embedding_timeout_seconds == 20.0
        assert settings.chromadb_collection == "songs"

    def test_env_var_override(self, monkeypatch) -> None:
        monkeypatch.setenv("EMBEDDING_BASE_URL", "http://vllm:80/v1")
        monkeypatch.setenv("EMBEDDING_DIMENSION", "768")
        settings = Settings(_env_file=None)
        assert settings.embedding_base_url == "http://vllm:80/v1"
        assert settings.embedding_dimension == 768


class TestLoadConfig:
    def test_reads_yaml_and_merges_env(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        cfg.write_text("recommendation:\n  cache_size: 5\nindexing:\n  workers: 2\n")
        settings = Settings(_env_file=None, embedding_model="bge-small")

        config = load_config(str(cfg), settings=settings)

        assert config["recommendation"]["cache_size"] == 5
        assert config["indexing"]["workers"] == 2
        assert config["embedding"]["model"] == "bge-small"

    def test_missing_file_yields_env_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "nope.yaml"), settings=Settings(_env_file=None))
        assert "recommendation" not in config
        assert config["logging"]["level"] == "INFO"

    def test_repo_config_matches_defaults(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(repo_config), settings=Settings(_env_file=None))
        assert recommendation_tuning(config) == RecommendationTuning()
        assert indexing_tuning(config) == IndexingTuning()

    def test_deep_merge_nested(self) -> None:
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        _deep_merge(base, {"a": {"c": 20}, "e": 5})
        assert base == {"a": {"b": 1, "c": 20}, "d": 3, "e": 5}


class TestTuning:
    def test_defaults(self) -> None:
        tuning = RecommendationTuning()
        assert tuning.preference_increment == 0.1
        assert tuning.max_preferences == 10
        assert tuning.candidates_per_preference == 5
        assert tuning.artist_weight == 0.8
        assert tuning.genre_weight == 0.6
        assert tuning.cache_size == 20
        assert tuning.popular_score == 0.5

    def test_empty_section_uses_defaults(self) -> None:
        assert recommendation_tuning({"recommendation": None}) == RecommendationTuning()

    def test_artist_weight_must_exceed_genre_weight(self) -> None:
        with pytest.raises(ConfigurationError, match="artist_weight"):
            recommendation_tuning({"recommendation": {"artist_weight": 0.5, "genre_weight": 0.6}})

    def test_weights_must_be_in_unit_interval(self) -> None:
        with pytest.raises(ConfigurationError):
            recommendation_tuning({"recommendation": {"artist_weight": 1.5}})

    def test_invalid_indexing_section(self) -> None:
        with pytest.raises(ConfigurationError):
            indexing_tuning({"indexing": {"queue_size": 0}})
