"""SQLAlchemy async session management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vector_ingest.utils.errors import MetadataWriteError
from vector_ingest.utils.logging import get_logger

logger = get_logger("database.session")


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to ``engine``."""
    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=False,
    )
    logger.debug("Session factory created")
    return factory


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work: commit on success, roll back on any error.

    A failed commit is raised as MetadataWriteError; errors from the body
    propagate unchanged.

    Usage:
        async with session_scope(factory) as session:
            result = await session.execute(select(Item))
    """
    async with session_factory() as session:
        try:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database session error: {e}")
                raise
            except Exception:
                await session.rollback()
                raise

            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database commit failed: {e}")
                raise MetadataWriteError(
                    "Failed to commit transaction", details={"error": str(e)}
                ) from e
        finally:
            await session.close()
