"""Service layer: preference tracking, recommendations, indexing and search."""

from tunetide.services.description_service import DescriptionService
from tunetide.services.embedding_service import EmbeddingService
from tunetide.services.indexing_queue import IndexingQueue
from tunetide.services.preference_tracker import PlayTracker, PreferenceTracker
from tunetide.services.recommendation_service import RecommendationService, rank_candidates
from tunetide.services.search_service import SearchService
from tunetide.services.song_indexer import SongIndexer

__all__ = [
    "DescriptionService",
    "EmbeddingService",
    "IndexingQueue",
    "PlayTracker",
    "PreferenceTracker",
    "RecommendationService",
    "SearchService",
    "SongIndexer",
    "rank_candidates",
]
