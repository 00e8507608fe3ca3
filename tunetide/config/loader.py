"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. ``config/config.yaml`` -- ranking and backfill defaults checked into the repo
  2. ``.env`` file          -- local developer overrides (not committed)
  3. Environment vars       -- set at deploy time

:func:`load_config` reads the YAML file first, then deep-merges the
environment-backed :class:`Settings` values on top.
"""

from pathlib import Path

import yaml

from tunetide.config.settings import Settings


def load_config(path: str | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file. Defaults to
            ``settings.config_path``.
        settings: Settings instance to merge; a fresh one is built if omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.config_path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "embedding": {
            "base_url": settings.embedding_base_url,
            "model": settings.embedding_model,
            "dimension": settings.embedding_dimension,
        },
        "text_generation": {
            "base_url": settings.text_generation_base_url,
            "model": settings.text_generation_model,
        },
        "vector_index": {
            "persist_dir": settings.chromadb_persist_dir,
            "collection": settings.chromadb_collection,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
