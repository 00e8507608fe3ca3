"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables, e.g. ``EMBEDDING_BASE_URL=http://vllm:80/v1``
  2. A ``.env`` file in the working directory

Field ``embedding_base_url`` maps to env var ``EMBEDDING_BASE_URL``.
Ranking and backfill tunables live in ``config/config.yaml`` instead (see
:mod:`tunetide.config.loader`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """TuneTide application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embedding endpoint (OpenAI-compatible, e.g. vLLM or Infinity) ===
    embedding_base_url: str = "http://localhost:8000/v1"
    embedding_model: str = "BAAI/bge-large-en-v1.5"
    embedding_api_key: str = "not-needed"
    embedding_dimension: int = 1024
    embedding_timeout_seconds: float = 20.0

    # === Text generation endpoint (song descriptions) ===
    text_generation_base_url: str = "http://localhost:8000/v1"
    text_generation_model: str = "meta-llama/Llama-3.1-8B-Instruct"
    text_generation_api_key: str = "not-needed"
    text_generation_timeout_seconds: float = 20.0

    # === Vector index ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "songs"
    vector_index_timeout_seconds: float = 10.0

    # === Relational store (catalog, play history, preferences, cache) ===
    database_path: str = "data/tunetide.db"
    lexical_search_timeout_seconds: float = 5.0

    # === App Config ===
    config_path: str = "config/config.yaml"
    app_env: str = "development"
    log_level: str = "INFO"
