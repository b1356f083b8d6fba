"""Database connection, session management and models."""

from sqlalchemy.ext.asyncio import AsyncEngine

from vector_ingest.database.connection import check_connection, create_engine
from vector_ingest.database.models import Base, Chunk, File, QueueItem
from vector_ingest.database.session import create_session_factory, session_scope


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    # Models
    "Base",
    "File",
    "QueueItem",
    "Chunk",
    # Connection
    "create_engine",
    "check_connection",
    "init_models",
    # Session
    "create_session_factory",
    "session_scope",
]
