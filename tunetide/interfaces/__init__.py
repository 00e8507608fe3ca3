"""Public interface definitions for every external collaborator.

Business logic in ``tunetide/services`` talks only to these abstract base
classes; concrete adapters in ``tunetide/providers`` are injected at
startup by :func:`tunetide.main.build_components`.  Tests substitute mocks
or the SQLite adapters against temporary databases.

    Interface               ->  Concrete implementations
    -------------------------------------------------------------
    IEmbeddingProvider      ->  OpenAICompatibleEmbeddingProvider,
                                HashEmbeddingProvider
    ITextGenerationProvider ->  OpenAICompatibleCompletionProvider
    ISongVectorIndex        ->  ChromaDBSongIndex
    ICatalogProvider        ->  SQLiteCatalogProvider
    IPlayHistoryProvider    ->  SQLitePlayHistoryProvider
    IPreferenceStore        ->  SQLitePreferenceStore
"""

from tunetide.interfaces.catalog_provider import ICatalogProvider
from tunetide.interfaces.embedding_provider import IEmbeddingProvider
from tunetide.interfaces.play_history_provider import IPlayHistoryProvider
from tunetide.interfaces.preference_store import IPreferenceStore
from tunetide.interfaces.text_generation_provider import ITextGenerationProvider
from tunetide.interfaces.vector_store_provider import ISongVectorIndex

__all__ = [
    "ICatalogProvider",
    "IEmbeddingProvider",
    "IPlayHistoryProvider",
    "IPreferenceStore",
    "ISongVectorIndex",
    "ITextGenerationProvider",
]
