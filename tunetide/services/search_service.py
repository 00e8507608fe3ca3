"""Natural-language song search.

The query is embedded and matched against the song vector index; hits are
hydrated from the catalog in distance order.  When the index is empty,
unreachable, or returns nothing that still exists in the catalog, the
query falls through to BM25 lexical search over the catalog text.  Either
way the caller gets a :class:`SearchResponse` whose ``source`` says which
path answered.
"""

from __future__ import annotations

import asyncio

from tunetide.interfaces.catalog_provider import ICatalogProvider
from tunetide.interfaces.vector_store_provider import ISongVectorIndex
from tunetide.models.search import SearchResponse
from tunetide.models.song import Song
from tunetide.services.description_service import DescriptionService
from tunetide.services.embedding_service import EmbeddingService
from tunetide.utils.errors import InvalidQueryError
from tunetide.utils.logging import get_logger

_DEFAULT_LIMIT = 10


class SearchService:
    """Vector search with a lexical fallback.

    Parameters
    ----------
    embeddings:
        Embeds the query text; never fails.
    index:
        Song vector index.
    catalog:
        Hydrates hits and serves lexical search.
    vector_timeout:
        Upper bound on the nearest-neighbour query, in seconds.
    lexical_timeout:
        Upper bound on the lexical fallback, in seconds.
    descriptions:
        Only consulted by :meth:`health` to probe the completion endpoint.
    """

    def __init__(
        self,
        embeddings: EmbeddingService,
        index: ISongVectorIndex,
        catalog: ICatalogProvider,
        vector_timeout: float = 10.0,
        lexical_timeout: float = 5.0,
        descriptions: DescriptionService | None = None,
    ) -> None:
        self._embeddings = embeddings
        self._index = index
        self._catalog = catalog
        self._vector_timeout = vector_timeout
        self._lexical_timeout = lexical_timeout
        self._descriptions = descriptions
        self._logger = get_logger(__name__)

    async def search_natural_language(
        self,
        query: str,
        limit: int = _DEFAULT_LIMIT,
    ) -> SearchResponse:
        """Return up to *limit* songs matching *query*, best first.

        Raises
        ------
        InvalidQueryError
            If *query* is blank or *limit* is not positive.
        """
        text = (query or "").strip()
        if not text:
            raise InvalidQueryError()
        if limit < 1:
            raise InvalidQueryError(message=f"limit must be positive, got {limit}")

        songs = await self._vector_search(text, limit)
        if songs:
            self._logger.info("search_vector", query_chars=len(text), results=len(songs))
            return SearchResponse(query=text, songs=songs, source="vector")

        songs = await self._lexical_search(text, limit)
        self._logger.info("search_lexical", query_chars=len(text), results=len(songs))
        return SearchResponse(query=text, songs=songs, source="lexical")

    async def _vector_search(self, text: str, limit: int) -> list[Song]:
        try:
            vector = await self._embeddings.embed(text)
            hits = await asyncio.wait_for(
                self._index.query_nearest(vector, limit), timeout=self._vector_timeout
            )
            if not hits:
                return []
            songs = await self._catalog.get_songs([hit.song_id for hit in hits])
        except asyncio.TimeoutError:
            self._logger.warning("search_vector_timeout", timeout=self._vector_timeout)
            return []
        except Exception as exc:
            self._logger.warning("search_vector_failed", error=str(exc))
            return []

        if len(songs) < len(hits):
            self._logger.debug("search_stale_vectors", hits=len(hits), hydrated=len(songs))
        return songs[:limit]

    async def _lexical_search(self, text: str, limit: int) -> list[Song]:
        try:
            songs = await asyncio.wait_for(
                self._catalog.lexical_search(text, limit), timeout=self._lexical_timeout
            )
        except asyncio.TimeoutError:
            self._logger.warning("search_lexical_timeout", timeout=self._lexical_timeout)
            return []
        except Exception as exc:
            self._logger.error("search_lexical_failed", error=str(exc))
            return []
        return songs[:limit]

    async def health(self) -> dict[str, bool | int | None]:
        """Report which backing services answer right now."""
        try:
            indexed = await asyncio.wait_for(self._index.count(), timeout=self._vector_timeout)
            index_ok = True
        except Exception as exc:
            self._logger.warning("health_vector_index_failed", error=str(exc))
            indexed, index_ok = None, False

        embedding_ok = await self._embeddings.check_health()
        generation_ok = (
            await self._descriptions.check_health() if self._descriptions is not None else False
        )
        return {
            "vector_index": index_ok,
            "indexed_songs": indexed,
            "embedding": embedding_ok,
            "text_generation": generation_ok,
        }
