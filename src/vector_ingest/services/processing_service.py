"""Document processing pipeline for one queue item."""

import time
from typing import List

from vector_ingest.config import ChunkingSettings
from vector_ingest.database.models import QueueItem
from vector_ingest.models.chunk import ChunkingConfig, ChunkRecord
from vector_ingest.models.queue import ProcessingResult
from vector_ingest.models.vector import VectorEntry
from vector_ingest.services import document_loader
from vector_ingest.services.chunking_service import resolve_strategy, validate_config
from vector_ingest.services.embedding_service import EmbeddingService
from vector_ingest.services.metadata_store import MetadataStore
from vector_ingest.services.vector_store import QdrantVectorStore
from vector_ingest.utils.errors import EmptyDocument
from vector_ingest.utils.logging import get_logger

logger = get_logger("processing_service")


class DocumentProcessingService:
    """
    Run the ingestion pipeline for a queue item.

    Stages, strictly in order:
    1. Resolve the loader by MIME type and load the document
    2. Chunk the text
    3. Embed every chunk in one batched call
    4. Persist all chunks in one batched insert
    5. Persist one vector per chunk in one batched insert

    Errors from any stage propagate unchanged. Nothing is rolled back: a
    vector write failure after stage 4 leaves chunks without vectors until the
    file is processed again.
    """

    def __init__(
        self,
        metadata_store: MetadataStore,
        vector_store: QdrantVectorStore,
        embedding_service: EmbeddingService,
        chunking: ChunkingSettings,
        embedding_version: int = 1,
    ) -> None:
        self.metadata_store = metadata_store
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.chunking_config = ChunkingConfig(
            window_size=chunking.chunk_size, overlap=chunking.chunk_overlap
        )
        self.strategy_name = chunking.chunking_strategy
        self.embedding_version = embedding_version

        # Fail at construction rather than on the first document
        validate_config(self.chunking_config)
        self._chunker = resolve_strategy(self.strategy_name)

    def can_process(self, mime_type: str) -> bool:
        return document_loader.is_supported(mime_type)

    def supported_mime_types(self) -> List[str]:
        return document_loader.supported_mime_types()

    async def process_document(self, queue_item: QueueItem) -> ProcessingResult:
        """
        Process the file behind a queue item.

        Args:
            queue_item: Queue item with its file loaded

        Returns:
            ProcessingResult with chunk and vector counts

        Raises:
            IngestionException: Whatever the failing stage raised
        """
        started = time.monotonic()
        file = queue_item.file
        file_id = file.id
        logger.info(
            f"Processing document: file_id={file_id}, name={file.name}, mime_type={file.mime_type}"
        )

        # Stage 1: load
        loader = document_loader.get_loader(file.mime_type)
        document = await loader.load(file.url)
        logger.info(
            f"Document loaded: file_id={file_id}, chars={len(document.text)}, "
            f"pages={document.metadata.page_count}"
        )

        # Stage 2: chunk
        chunks = self._chunker(document.text, self.chunking_config)
        if not chunks:
            raise EmptyDocument(details={"file_id": file_id})
        for chunk in chunks:
            chunk.page_number = document.page_at(chunk.start_char)
        logger.info(
            f"Document chunked: file_id={file_id}, chunks={len(chunks)}, "
            f"strategy={self.strategy_name}, size={self.chunking_config.window_size}, "
            f"overlap={self.chunking_config.overlap}"
        )

        # Stage 3: embed
        embeddings = await self.embedding_service.embed_batch([c.text for c in chunks])
        logger.info(
            f"Embeddings generated: file_id={file_id}, vectors={len(embeddings.vectors)}, "
            f"dim={embeddings.dimension}, tokens={embeddings.usage.total_tokens}"
        )

        # Stage 4: chunk rows
        chunks_created = await self.metadata_store.create_chunks_batch(
            [
                ChunkRecord(
                    file_id=file_id,
                    chunk_index=chunk.index,
                    text=chunk.text,
                    page_number=chunk.page_number,
                    chunk_strategy=chunk.strategy_name,
                    start_char=chunk.start_char,
                    end_char=chunk.end_char,
                )
                for chunk in chunks
            ]
        )

        # Stage 5: vectors
        created_at = int(time.time() * 1000)
        insert_result = await self.vector_store.insert_vectors(
            [
                VectorEntry(
                    file_id=file_id,
                    chunk_index=chunk.index,
                    page_number=chunk.page_number,
                    chunk_strategy=chunk.strategy_name,
                    vector=vector,
                    created_at=created_at,
                    embedding_version=self.embedding_version,
                )
                for chunk, vector in zip(chunks, embeddings.vectors)
            ]
        )

        processing_time_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Document processed: file_id={file_id}, chunks={chunks_created}, "
            f"vectors={insert_result.inserted_count}, time_ms={processing_time_ms}"
        )
        return ProcessingResult(
            file_id=file_id,
            chunks_created=chunks_created,
            vectors_inserted=insert_result.inserted_count,
            processing_time_ms=processing_time_ms,
        )
