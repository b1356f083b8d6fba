"""Relational store gateway: chunk rows and the processing queue.

Each operation runs in its own session (one unit of work per call) built from
the injected session factory.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vector_ingest.database.models import Chunk, File, QueueItem
from vector_ingest.database.session import session_scope
from vector_ingest.models.chunk import ChunkRecord
from vector_ingest.models.queue import QueueStatsResponse, QueueStatus
from vector_ingest.repositories import ChunkRepository, FileRepository, QueueRepository
from vector_ingest.utils.errors import NotFoundError
from vector_ingest.utils.logging import get_logger

logger = get_logger("metadata_store")


class MetadataStore:
    """Chunk and queue persistence over SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # Chunks

    async def create_chunks_batch(self, chunks: Sequence[ChunkRecord]) -> int:
        """
        Insert chunks in one transaction.

        Existing ``(file_id, chunk_index)`` pairs are skipped, so re-running a
        file inserts nothing new.

        Returns:
            Number of rows inserted
        """
        async with session_scope(self._session_factory) as session:
            inserted = await ChunkRepository(session).create_many(chunks)
        logger.info(f"Chunks persisted: requested={len(chunks)}, inserted={inserted}")
        return inserted

    async def list_chunks(self, file_id: str, skip: int = 0, limit: int = 1000) -> List[Chunk]:
        async with session_scope(self._session_factory) as session:
            return await ChunkRepository(session).get_by_file_id(file_id, skip=skip, limit=limit)

    async def count_chunks(self, file_id: str) -> int:
        async with session_scope(self._session_factory) as session:
            return await ChunkRepository(session).count({"file_id": file_id})

    async def delete_chunks(self, file_id: str) -> int:
        async with session_scope(self._session_factory) as session:
            deleted = await ChunkRepository(session).delete_by_file_id(file_id)
        logger.info(f"Deleted {deleted} chunks for file {file_id}")
        return deleted

    async def chunk_stats(self) -> Dict[str, int]:
        """Chunk counts per chunking strategy, plus ``total``."""
        async with session_scope(self._session_factory) as session:
            by_strategy = await ChunkRepository(session).count_by_strategy()
        return {**by_strategy, "total": sum(by_strategy.values())}

    # Queue

    async def set_queue_status(
        self, queue_id: str, status: QueueStatus, last_error: Optional[str] = None
    ) -> None:
        """
        Overwrite the status of a queue item and stamp ``updated_at``.

        Transitions are not validated here; the worker owns the state machine.

        Raises:
            NotFoundError: If no queue item has this id
        """
        async with session_scope(self._session_factory) as session:
            updated = await QueueRepository(session).set_status(queue_id, status, last_error)
        if not updated:
            raise NotFoundError("Queue item", queue_id)
        logger.debug(f"Queue item {queue_id} -> {QueueStatus(status).value}")

    async def find_queued_items(self) -> List[QueueItem]:
        """All queued items with their file, oldest first."""
        async with session_scope(self._session_factory) as session:
            return await QueueRepository(session).find_by_status(QueueStatus.QUEUED)

    async def get_queue_item(self, queue_id: str) -> Optional[QueueItem]:
        async with session_scope(self._session_factory) as session:
            return await QueueRepository(session).get_with_file(queue_id)

    async def get_queue_item_by_file(self, file_id: str) -> Optional[QueueItem]:
        async with session_scope(self._session_factory) as session:
            return await QueueRepository(session).get_by_file_id(file_id)

    async def list_queue_items(
        self,
        status: Optional[QueueStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[QueueItem]:
        async with session_scope(self._session_factory) as session:
            return await QueueRepository(session).find_by_status(status, skip=skip, limit=limit)

    async def count_queue_items(self, status: Optional[QueueStatus] = None) -> int:
        filters = {"status": QueueStatus(status).value} if status is not None else None
        async with session_scope(self._session_factory) as session:
            return await QueueRepository(session).count(filters)

    async def count_by_status(self) -> Dict[str, int]:
        async with session_scope(self._session_factory) as session:
            return await QueueRepository(session).count_by_status()

    async def queue_stats(self) -> QueueStatsResponse:
        counts = await self.count_by_status()
        return QueueStatsResponse(**counts, total=sum(counts.values()))

    # Files

    async def get_file(self, file_id: str) -> Optional[File]:
        async with session_scope(self._session_factory) as session:
            return await FileRepository(session).get_by_id(file_id)

    async def create_file_with_queue_item(
        self,
        name: str,
        url: str,
        mime_type: str,
        size: int = 0,
    ) -> QueueItem:
        """Register a file together with its ``queued`` queue item."""
        async with session_scope(self._session_factory) as session:
            file = await FileRepository(session).create(
                name=name, url=url, mime_type=mime_type, size=size
            )
            queue = QueueRepository(session)
            created = await queue.create(file_id=file.id, status=QueueStatus.QUEUED.value)
            item = await queue.get_with_file(created.id)
        logger.info(f"Enqueued file {file.id} ({name}, {mime_type}) as queue item {item.id}")
        return item
