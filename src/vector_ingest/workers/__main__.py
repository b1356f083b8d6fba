"""Standalone worker entrypoint: ``python -m vector_ingest.workers``."""

import asyncio
import signal

from vector_ingest.config import get_settings
from vector_ingest.services.container import ServiceContainer
from vector_ingest.utils.logging import get_logger, setup_logging

logger = get_logger("worker_main")


def log_banner(settings) -> None:
    logger.info("=" * 60)
    logger.info(f"{settings.app_name} worker")
    logger.info(f"Environment:     {settings.environment.value}")
    logger.info(f"Poll interval:   {settings.worker.poll_interval}s")
    logger.info(f"Chunk size:      {settings.chunking.chunk_size}")
    logger.info(f"Chunk overlap:   {settings.chunking.chunk_overlap}")
    logger.info(f"Chunk strategy:  {settings.chunking.chunking_strategy}")
    logger.info(f"Embedding model: {settings.embedding.resolved_model_name}")
    logger.info(f"Collection:      {settings.qdrant.collection_name}")
    logger.info("=" * 60)


async def run() -> None:
    settings = get_settings()
    log_banner(settings)

    container = ServiceContainer.build(settings)
    worker = container.create_worker()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, worker.stop)
        except NotImplementedError:
            # Windows event loops
            pass

    try:
        await worker.start()
    finally:
        await container.close()


def main() -> None:
    setup_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
