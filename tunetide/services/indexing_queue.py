"""Background indexing queue.

Catalog writes call :meth:`IndexingQueue.submit` and return immediately;
worker tasks drain the queue and re-index each song from its latest
catalog state.  A failed job is logged and dropped.  It never reaches the
request that triggered it.
"""

from __future__ import annotations

import asyncio

from tunetide.services.song_indexer import SongIndexer
from tunetide.utils.logging import get_logger


class IndexingQueue:
    """Bounded asyncio queue of song ids awaiting (re-)indexing."""

    def __init__(self, indexer: SongIndexer, maxsize: int = 100, workers: int = 1) -> None:
        self._indexer = indexer
        self._queue: asyncio.Queue[int] = asyncio.Queue(maxsize=maxsize)
        self._worker_count = max(1, workers)
        self._workers: list[asyncio.Task[None]] = []
        self._logger = get_logger(__name__)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._workers)

    def submit(self, song_id: int) -> bool:
        """Queue *song_id* for indexing.  Returns ``False`` if the queue is full."""
        try:
            self._queue.put_nowait(song_id)
        except asyncio.QueueFull:
            self._logger.warning("indexing_queue_full", song_id=song_id, size=self._queue.maxsize)
            return False
        self._logger.debug("indexing_job_queued", song_id=song_id, pending=self._queue.qsize())
        return True

    def start(self) -> None:
        if self.running:
            return
        self._workers = [
            asyncio.create_task(self._worker(n), name=f"indexing-worker-{n}")
            for n in range(self._worker_count)
        ]
        self._logger.info("indexing_queue_started", workers=self._worker_count)

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Cancel the workers.  Jobs still queued are abandoned."""
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._logger.info("indexing_queue_stopped", abandoned=self._queue.qsize())

    async def _worker(self, number: int) -> None:
        while True:
            song_id = await self._queue.get()
            try:
                await self._indexer.reindex_song(song_id)
            except Exception:
                self._logger.error(
                    "indexing_job_failed", song_id=song_id, worker=number, exc_info=True
                )
            finally:
                self._queue.task_done()
