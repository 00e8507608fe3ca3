"""ChromaDB song vector index.

Wraps ``chromadb.PersistentClient`` to implement :class:`ISongVectorIndex`.
One record per catalog song: the record id is index-local (a UUID), while
``song_id`` lives in the record metadata and is the key every lookup uses.
Cosine distance is used for nearest-neighbour search.

ChromaDB's client is synchronous; every call is pushed to a worker thread
and bounded by ``timeout`` so a wedged index cannot stall the event loop.
"""

from __future__ import annotations

import asyncio
import functools
import os
import uuid
from typing import Any, Callable, TypeVar

# Telemetry off before chromadb is imported; some chromadb releases ship a
# PostHog client that breaks against newer posthog versions.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from tunetide.interfaces.vector_store_provider import ISongVectorIndex
from tunetide.models.search import SongEmbeddingRecord, VectorHit
from tunetide.utils.errors import VectorIndexError

logger = structlog.get_logger(logger_name=__name__)

_T = TypeVar("_T")

_METADATA_FIELDS = ("title", "artist_name", "album_title", "genre", "description")


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Stops ChromaDB from loading its default ONNX model.

    Vectors are always computed by the embedding service and passed in.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "tunetide passes pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        return "noop_precomputed"


def _record_document(record: SongEmbeddingRecord) -> str:
    return " ".join(
        part
        for part in (
            record.title,
            record.artist_name,
            record.album_title,
            record.genre,
            record.description,
        )
        if part
    )


def _record_metadata(record: SongEmbeddingRecord) -> dict[str, Any]:
    meta: dict[str, Any] = {"song_id": record.song_id}
    for field in _METADATA_FIELDS:
        # ChromaDB rejects None metadata values.
        meta[field] = getattr(record, field) or ""
    return meta


class ChromaDBSongIndex(ISongVectorIndex):
    """Song vector index backed by ChromaDB with local persistence."""

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "songs",
        dimension: int | None = None,
        timeout: float = 10.0,
        client: Any | None = None,
    ) -> None:
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._dimension = dimension
        self._timeout = timeout
        if client is None:
            client = chromadb.PersistentClient(
                path=persist_directory,
                settings=chromadb.config.Settings(anonymized_telemetry=False),
            )
        self._client = client
        self._collection: Any | None = None
        # Serialises lookup-then-write so two upserts for one song cannot
        # both take the create branch.
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # ISongVectorIndex implementation
    # ------------------------------------------------------------------

    async def ensure_schema(self) -> None:
        """Open or create the collection.  Safe to call repeatedly."""
        if self._collection is not None:
            return
        self._collection = await self._call(self._open_collection)
        logger.info(
            "song_index_ready",
            collection=self._collection_name,
            path=self._persist_directory,
        )

    async def find_by_song_id(self, song_id: int) -> SongEmbeddingRecord | None:
        records = await self._records_for_song(song_id)
        return records[0] if records else None

    async def upsert_song(
        self,
        record: SongEmbeddingRecord,
        vector: list[float],
    ) -> tuple[str, bool]:
        if self._dimension is not None and len(vector) != self._dimension:
            raise VectorIndexError(
                message=f"Vector has {len(vector)} dims; index expects {self._dimension}",
                provider_name=self.get_provider_name(),
            )
        collection = await self._get_collection()
        metadata = _record_metadata(record)
        document = _record_document(record)

        async with self._write_lock:
            existing = await self._records_for_song(record.song_id)
            if existing:
                record_id = existing[0].record_id
                await self._call(
                    collection.update,
                    ids=[record_id],
                    embeddings=[vector],
                    metadatas=[metadata],
                    documents=[document],
                )
                stale = [r.record_id for r in existing[1:]]
                if stale:
                    await self._call(collection.delete, ids=stale)
                    logger.warning(
                        "song_index_duplicates_removed",
                        song_id=record.song_id,
                        removed=len(stale),
                    )
                created = False
            else:
                record_id = str(uuid.uuid4())
                await self._call(
                    collection.add,
                    ids=[record_id],
                    embeddings=[vector],
                    metadatas=[metadata],
                    documents=[document],
                )
                created = True

        logger.info(
            "song_index_upsert",
            song_id=record.song_id,
            record_id=record_id,
            created=created,
        )
        return record_id, created

    async def query_nearest(self, vector: list[float], limit: int = 10) -> list[VectorHit]:
        if limit < 1:
            return []
        collection = await self._get_collection()
        total = await self._call(collection.count)
        if total == 0:
            return []

        results = await self._call(
            collection.query,
            query_embeddings=[vector],
            n_results=min(limit, total),
            include=["metadatas", "distances"],
        )

        hits: list[VectorHit] = []
        seen: set[int] = set()
        ids = results.get("ids") or [[]]
        metadatas = results.get("metadatas") or [[]]
        distances = results.get("distances") or [[]]
        for record_id, meta, distance in zip(ids[0], metadatas[0], distances[0]):
            if not meta or "song_id" not in meta:
                continue
            song_id = int(meta["song_id"])
            if song_id in seen:
                continue
            seen.add(song_id)
            hits.append(VectorHit(song_id=song_id, distance=float(distance), record_id=record_id))
        return hits

    async def count(self) -> int:
        collection = await self._get_collection()
        return int(await self._call(collection.count))

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _open_collection(self) -> Any:
        # Collections persisted with a different embedding function make
        # newer chromadb raise; reopen without one in that case.
        try:
            return self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            return self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
            )

    async def _get_collection(self) -> Any:
        if self._collection is None:
            await self.ensure_schema()
        return self._collection

    async def _records_for_song(self, song_id: int) -> list[SongEmbeddingRecord]:
        collection = await self._get_collection()
        result = await self._call(
            collection.get,
            where={"song_id": song_id},
            include=["metadatas", "embeddings"],
        )
        ids = result.get("ids") or []
        metadatas = result.get("metadatas") or []
        embeddings = result.get("embeddings")
        records: list[SongEmbeddingRecord] = []
        for i, record_id in enumerate(ids):
            meta = metadatas[i] if i < len(metadatas) and metadatas[i] else {}
            vector = None
            if embeddings is not None and i < len(embeddings) and embeddings[i] is not None:
                vector = [float(x) for x in embeddings[i]]
            records.append(
                SongEmbeddingRecord(
                    song_id=int(meta.get("song_id", song_id)),
                    title=str(meta.get("title", "")),
                    artist_name=str(meta.get("artist_name", "")),
                    album_title=str(meta.get("album_title", "")),
                    genre=str(meta.get("genre", "")),
                    description=str(meta.get("description", "")),
                    record_id=record_id,
                    embedding=vector,
                )
            )
        return records

    async def _call(self, fn: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
        """Run a blocking chromadb call in a thread, bounded by the timeout."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(functools.partial(fn, *args, **kwargs)),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise VectorIndexError(
                message=f"ChromaDB call timed out after {self._timeout}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except VectorIndexError:
            raise
        except Exception as exc:
            raise VectorIndexError(
                message=f"ChromaDB error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
