"""File repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from vector_ingest.database.models import File
from vector_ingest.repositories.base import BaseRepository


class FileRepository(BaseRepository[File]):
    """Repository for file data access operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(File, session)
