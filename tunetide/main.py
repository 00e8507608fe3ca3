"""Component assembly for TuneTide.

:func:`build_components` wires every provider and service from
:class:`~tunetide.config.settings.Settings` and the YAML tuning file and
returns them as a flat dict, the shape the CLI (or any host application)
keeps around for the process lifetime.  :func:`startup` and
:func:`shutdown` bracket that lifetime: database schema and vector
collection creation on the way in, indexing workers stopped on the way out.
"""

from __future__ import annotations

from typing import Any

import structlog

from tunetide.config.loader import load_config
from tunetide.config.settings import Settings
from tunetide.config.tuning import indexing_tuning, recommendation_tuning
from tunetide.providers.catalog.sqlite_catalog_provider import SQLiteCatalogProvider
from tunetide.providers.embedding.openai_compatible_embedding_provider import (
    OpenAICompatibleEmbeddingProvider,
)
from tunetide.providers.history.sqlite_play_history_provider import SQLitePlayHistoryProvider
from tunetide.providers.llm.openai_compatible_completion_provider import (
    OpenAICompatibleCompletionProvider,
)
from tunetide.providers.preferences.sqlite_preference_store import SQLitePreferenceStore
from tunetide.providers.vector_store.chromadb_song_index import ChromaDBSongIndex
from tunetide.services.description_service import DescriptionService
from tunetide.services.embedding_service import EmbeddingService
from tunetide.services.indexing_queue import IndexingQueue
from tunetide.services.preference_tracker import PlayTracker, PreferenceTracker
from tunetide.services.recommendation_service import RecommendationService
from tunetide.services.search_service import SearchService
from tunetide.services.song_indexer import SongIndexer
from tunetide.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def build_components(
    app_settings: Settings | None = None,
    config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance.

    Raises
    ------
    tunetide.utils.errors.ConfigurationError
        If the tuning section of the config fails validation.
    """
    app_settings = app_settings or Settings()
    if config is None:
        config = load_config(app_settings.config_path, settings=app_settings)
    rec_tuning = recommendation_tuning(config)
    idx_tuning = indexing_tuning(config)

    # -- Relational stores (one SQLite file) --
    catalog = SQLiteCatalogProvider(db_path=app_settings.database_path)
    play_history = SQLitePlayHistoryProvider(db_path=app_settings.database_path)
    preferences = SQLitePreferenceStore(db_path=app_settings.database_path)

    # -- Model endpoints --
    embedding_provider = OpenAICompatibleEmbeddingProvider(app_settings)
    completion_provider = OpenAICompatibleCompletionProvider(app_settings)
    embeddings = EmbeddingService(
        primary=embedding_provider,
        dimension=app_settings.embedding_dimension,
        timeout=app_settings.embedding_timeout_seconds,
    )
    descriptions = DescriptionService(
        completion_provider, timeout=app_settings.text_generation_timeout_seconds
    )

    # -- Vector index --
    song_index = ChromaDBSongIndex(
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
        dimension=app_settings.embedding_dimension,
        timeout=app_settings.vector_index_timeout_seconds,
    )

    # -- Services --
    recommendation_service = RecommendationService(
        catalog=catalog,
        play_history=play_history,
        preferences=preferences,
        tuning=rec_tuning,
    )
    preference_tracker = PreferenceTracker(
        catalog=catalog,
        preferences=preferences,
        recommendations=recommendation_service,
    )
    play_tracker = PlayTracker(
        catalog=catalog,
        play_history=play_history,
        tracker=preference_tracker,
    )
    song_indexer = SongIndexer(
        catalog=catalog,
        descriptions=descriptions,
        embeddings=embeddings,
        index=song_index,
        tuning=idx_tuning,
    )
    indexing_queue = IndexingQueue(
        song_indexer, maxsize=idx_tuning.queue_size, workers=idx_tuning.workers
    )
    search_service = SearchService(
        embeddings=embeddings,
        index=song_index,
        catalog=catalog,
        vector_timeout=app_settings.vector_index_timeout_seconds,
        lexical_timeout=app_settings.lexical_search_timeout_seconds,
        descriptions=descriptions,
    )

    _logger.info(
        "components_built",
        database=app_settings.database_path,
        embedding_model=app_settings.embedding_model,
        text_generation_model=app_settings.text_generation_model,
        collection=app_settings.chromadb_collection,
    )

    return {
        "settings": app_settings,
        "config": config,
        "catalog": catalog,
        "play_history": play_history,
        "preferences": preferences,
        "embedding_service": embeddings,
        "description_service": descriptions,
        "song_index": song_index,
        "recommendation_service": recommendation_service,
        "preference_tracker": preference_tracker,
        "play_tracker": play_tracker,
        "song_indexer": song_indexer,
        "indexing_queue": indexing_queue,
        "search_service": search_service,
    }


async def startup(components: dict[str, Any], start_workers: bool = True) -> None:
    """Create schemas and, optionally, start the background indexing workers."""
    await components["catalog"].initialize()
    await components["play_history"].initialize()
    await components["preferences"].initialize()
    await components["song_index"].ensure_schema()
    if start_workers:
        components["indexing_queue"].start()
    _logger.info("startup_complete", workers=start_workers)


async def shutdown(components: dict[str, Any]) -> None:
    await components["indexing_queue"].stop()
    _logger.info("shutdown_complete")
