"""Construction of the long-lived services from settings."""

from typing import Any, Optional

from qdrant_client import QdrantClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vector_ingest.config import Settings
from vector_ingest.database.connection import create_engine
from vector_ingest.database.session import create_session_factory
from vector_ingest.services.embedding_service import EmbeddingService
from vector_ingest.services.metadata_store import MetadataStore
from vector_ingest.services.processing_service import DocumentProcessingService
from vector_ingest.services.vector_store import QdrantVectorStore
from vector_ingest.utils.logging import get_logger

logger = get_logger("container")


class ServiceContainer:
    """
    Services shared by the worker, the HTTP app and the admin CLI.

    Built once per process. The embedding dimension is checked against the
    vector store dimension here, before any document is touched.
    """

    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        metadata_store: MetadataStore,
        vector_store: QdrantVectorStore,
        embedding_service: EmbeddingService,
        processing_service: DocumentProcessingService,
    ) -> None:
        self.settings = settings
        self.engine = engine
        self.session_factory = session_factory
        self.metadata_store = metadata_store
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.processing_service = processing_service

    @classmethod
    def build(
        cls,
        settings: Settings,
        engine: Optional[AsyncEngine] = None,
        qdrant_client: Optional[QdrantClient] = None,
        embedding_client: Optional[Any] = None,
    ) -> "ServiceContainer":
        """
        Wire every service from ``settings``.

        Args:
            settings: Application settings
            engine: Existing engine to reuse (tests)
            qdrant_client: Existing Qdrant client to reuse (tests)
            embedding_client: OpenAI-compatible client to reuse (tests)

        Raises:
            InvalidConfiguration: If the chunking window or the embedding dimension is invalid
        """
        engine = engine or create_engine(settings.database)
        session_factory = create_session_factory(engine)

        embedding_service = EmbeddingService(settings.embedding, client=embedding_client)
        embedding_service.validate_dimension(settings.qdrant.vector_dimension)

        metadata_store = MetadataStore(session_factory)
        vector_store = QdrantVectorStore(settings.qdrant, client=qdrant_client)
        processing_service = DocumentProcessingService(
            metadata_store=metadata_store,
            vector_store=vector_store,
            embedding_service=embedding_service,
            chunking=settings.chunking,
            embedding_version=settings.embedding.embedding_version,
        )

        logger.info(
            f"Services initialized: collection={vector_store.collection_name}, "
            f"model={embedding_service.model}, dimension={embedding_service.dimension}"
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=session_factory,
            metadata_store=metadata_store,
            vector_store=vector_store,
            embedding_service=embedding_service,
            processing_service=processing_service,
        )

    def create_worker(self):
        from vector_ingest.workers.queue_worker import QueueWorker

        return QueueWorker(
            metadata_store=self.metadata_store,
            processing_service=self.processing_service,
            poll_interval=self.settings.worker.poll_interval,
        )

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine closed")
