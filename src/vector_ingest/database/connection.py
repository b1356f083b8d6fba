"""Database engine creation and connectivity checks."""

from typing import Any, Dict

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from vector_ingest.config import DatabaseSettings
from vector_ingest.utils.logging import get_logger

logger = get_logger("database")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create and configure the SQLAlchemy async engine."""
    db_url = settings.async_url

    engine_kwargs: Dict[str, Any] = {"echo": settings.echo}
    if settings.is_sqlite:
        if ":memory:" in db_url:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_pre_ping=True,
        )

    engine = create_async_engine(db_url, **engine_kwargs)

    if settings.is_sqlite:
        # ON DELETE CASCADE is only enforced with the pragma set
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(
        f"Database engine created: dialect={engine.dialect.name}, "
        f"pooled={not settings.is_sqlite}"
    )
    return engine


async def check_connection(engine: AsyncEngine) -> bool:
    """Check if database connection is available."""
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            row = result.fetchone()
            return row is not None and row[0] == 1
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
