"""Chunk repository: batched inserts and per-file reads."""

from typing import Dict, List, Sequence, Set, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vector_ingest.database.models import Chunk
from vector_ingest.models.chunk import ChunkRecord
from vector_ingest.repositories.base import BaseRepository
from vector_ingest.utils.errors import MetadataStoreError, MetadataWriteError
from vector_ingest.utils.logging import get_logger

logger = get_logger("repositories.chunk")


class ChunkRepository(BaseRepository[Chunk]):
    """Repository for chunk data access operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Chunk, session)

    async def _existing_keys(self, file_ids: Set[str]) -> Set[Tuple[str, int]]:
        result = await self.session.execute(
            select(Chunk.file_id, Chunk.chunk_index).where(Chunk.file_id.in_(file_ids))
        )
        return {(file_id, chunk_index) for file_id, chunk_index in result.all()}

    async def create_many(self, records: Sequence[ChunkRecord]) -> int:
        """
        Insert chunks, skipping (file_id, chunk_index) pairs that already exist.

        Returns:
            Number of rows actually inserted
        """
        if not records:
            return 0

        try:
            existing = await self._existing_keys({r.file_id for r in records})
            rows: List[Chunk] = []
            for record in records:
                key = (record.file_id, record.chunk_index)
                if key in existing:
                    continue
                existing.add(key)
                rows.append(Chunk(**record.model_dump()))

            self.session.add_all(rows)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error inserting {len(records)} chunks: {e}")
            raise MetadataWriteError(
                "Failed to insert chunks",
                details={"count": len(records), "error": str(e)},
            ) from e

        skipped = len(records) - len(rows)
        if skipped:
            logger.info(f"Skipped {skipped} chunks that already exist")
        return len(rows)

    async def get_by_file_id(self, file_id: str, skip: int = 0, limit: int = 1000) -> List[Chunk]:
        try:
            result = await self.session.execute(
                select(Chunk)
                .where(Chunk.file_id == file_id)
                .order_by(Chunk.chunk_index.asc())
                .offset(skip)
                .limit(limit)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error getting chunks for file {file_id}: {e}")
            raise MetadataStoreError("Failed to retrieve chunks") from e

    async def delete_by_file_id(self, file_id: str) -> int:
        try:
            result = await self.session.execute(delete(Chunk).where(Chunk.file_id == file_id))
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting chunks for file {file_id}: {e}")
            raise MetadataWriteError("Failed to delete chunks", details={"file_id": file_id}) from e

    async def count_by_strategy(self) -> Dict[str, int]:
        try:
            result = await self.session.execute(
                select(Chunk.chunk_strategy, func.count()).group_by(Chunk.chunk_strategy)
            )
            return {strategy: count for strategy, count in result.all()}
        except SQLAlchemyError as e:
            logger.error(f"Error counting chunks by strategy: {e}")
            raise MetadataStoreError("Failed to count chunks") from e
