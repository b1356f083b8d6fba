"""Queue repository for the processing state machine."""

from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vector_ingest.database.models import QueueItem, utcnow
from vector_ingest.models.queue import QueueStatus
from vector_ingest.repositories.base import BaseRepository
from vector_ingest.utils.errors import MetadataStoreError, MetadataWriteError
from vector_ingest.utils.logging import get_logger

logger = get_logger("repositories.queue")


class QueueRepository(BaseRepository[QueueItem]):
    """Repository for queue item data access operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(QueueItem, session)

    async def get_with_file(self, id: str) -> Optional[QueueItem]:
        try:
            result = await self.session.execute(
                select(QueueItem).options(selectinload(QueueItem.file)).where(QueueItem.id == id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting queue item {id}: {e}")
            raise MetadataStoreError("Failed to retrieve queue item") from e

    async def get_by_file_id(self, file_id: str) -> Optional[QueueItem]:
        try:
            result = await self.session.execute(
                select(QueueItem)
                .options(selectinload(QueueItem.file))
                .where(QueueItem.file_id == file_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting queue item for file {file_id}: {e}")
            raise MetadataStoreError("Failed to retrieve queue item") from e

    async def find_by_status(
        self,
        status: Optional[QueueStatus] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[QueueItem]:
        """
        Queue items (file eagerly loaded), oldest first.

        Args:
            status: Only items in this status; all items when None
            skip: Number of items to skip
            limit: Maximum number of items, unbounded when None
        """
        try:
            query = select(QueueItem).options(selectinload(QueueItem.file))
            if status is not None:
                query = query.where(QueueItem.status == QueueStatus(status).value)
            query = query.order_by(QueueItem.created_at.asc()).offset(skip)
            if limit is not None:
                query = query.limit(limit)

            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing queue items (status={status}): {e}")
            raise MetadataStoreError("Failed to retrieve queue items") from e

    async def set_status(
        self, id: str, status: QueueStatus, last_error: Optional[str] = None
    ) -> int:
        """
        Unconditionally overwrite status and last_error, stamping updated_at.

        Returns:
            Number of rows updated (0 when the item does not exist)
        """
        try:
            result = await self.session.execute(
                update(QueueItem)
                .where(QueueItem.id == id)
                .values(
                    status=QueueStatus(status).value,
                    last_error=last_error,
                    updated_at=utcnow(),
                )
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"Error updating queue item {id} to {status}: {e}")
            raise MetadataWriteError(
                "Failed to update queue status",
                details={"queue_id": id, "status": QueueStatus(status).value},
            ) from e

    async def count_by_status(self) -> Dict[str, int]:
        """Item counts keyed by status value (every status present, zero included)."""
        try:
            result = await self.session.execute(
                select(QueueItem.status, func.count()).group_by(QueueItem.status)
            )
            counts = {status.value: 0 for status in QueueStatus}
            for status, count in result.all():
                counts[status] = count
            return counts
        except SQLAlchemyError as e:
            logger.error(f"Error counting queue items by status: {e}")
            raise MetadataStoreError("Failed to count queue items") from e
