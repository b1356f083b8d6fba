"""Repositories over an AsyncSession."""

from vector_ingest.repositories.base import BaseRepository
from vector_ingest.repositories.chunk_repository import ChunkRepository
from vector_ingest.repositories.file_repository import FileRepository
from vector_ingest.repositories.queue_repository import QueueRepository

__all__ = [
    "BaseRepository",
    "ChunkRepository",
    "FileRepository",
    "QueueRepository",
]
