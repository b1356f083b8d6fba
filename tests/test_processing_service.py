import pytest

from tests.conftest import make_pdf
from vector_ingest.config import ChunkingSettings
from vector_ingest.services.processing_service import DocumentProcessingService
from vector_ingest.utils.errors import (
    CollectionNotReady,
    EmptyDocument,
    InvalidConfiguration,
    UnsupportedDocumentType,
)


async def enqueue(container, path, mime_type="text/plain"):
    return await container.metadata_store.create_file_with_queue_item(
        name=path.name, url=str(path), mime_type=mime_type, size=path.stat().st_size
    )


async def test_successful_run_creates_one_chunk_and_vector_per_window(container, text_file):
    item = await enqueue(container, text_file)

    result = await container.processing_service.process_document(item)

    assert result.file_id == item.file_id
    assert result.chunks_created == result.vectors_inserted == 3
    assert result.processing_time_ms >= 0

    chunks = await container.metadata_store.list_chunks(item.file_id)
    vectors = await container.vector_store.get_by_file(item.file_id)
    assert [c.chunk_index for c in chunks] == [v.chunk_index for v in vectors] == [0, 1, 2]
    assert [c.start_char for c in chunks] == [0, 10, 20]
    assert all(c.chunk_strategy == v.chunk_strategy == "fixed-size" for c, v in zip(chunks, vectors))
    assert all(v.embedding_version == 1 for v in vectors)
    assert chunks[0].page_number is None


async def test_pdf_chunks_record_their_page(container, tmp_path):
    path = tmp_path / "pages.pdf"
    path.write_bytes(make_pdf(["Hello page one", "Second page text"]))
    item = await enqueue(container, path, "application/pdf")

    await container.processing_service.process_document(item)

    chunks = await container.metadata_store.list_chunks(item.file_id)
    assert chunks[0].page_number == 1
    assert chunks[-1].page_number == 2


async def test_reprocessing_is_idempotent(container, text_file):
    item = await enqueue(container, text_file)

    await container.processing_service.process_document(item)
    again = await container.processing_service.process_document(item)

    assert again.chunks_created == 0
    assert await container.metadata_store.count_chunks(item.file_id) == 3
    assert await container.vector_store.count_by_file(item.file_id) == 3


async def test_unsupported_mime_type_stops_before_any_write(container, embedding_client, text_file):
    item = await enqueue(container, text_file, "application/msword")

    with pytest.raises(UnsupportedDocumentType):
        await container.processing_service.process_document(item)

    assert embedding_client.embeddings.calls == []
    assert await container.metadata_store.count_chunks(item.file_id) == 0


async def test_empty_document_is_not_embedded(container, embedding_client, tmp_path):
    path = tmp_path / "blank.txt"
    path.write_text("   \n\n   ", encoding="utf-8")
    item = await enqueue(container, path)

    with pytest.raises(EmptyDocument, match="Document may be empty"):
        await container.processing_service.process_document(item)

    assert embedding_client.embeddings.calls == []


async def test_vector_failure_leaves_chunks_without_vectors(container, text_file):
    item = await enqueue(container, text_file)
    await container.vector_store.drop_collection()

    with pytest.raises(CollectionNotReady):
        await container.processing_service.process_document(item)

    # no compensation: chunk rows stay until the file is reprocessed
    assert await container.metadata_store.count_chunks(item.file_id) == 3


async def test_can_process_reports_supported_types(container):
    service = container.processing_service
    assert service.can_process("application/pdf")
    assert not service.can_process("image/png")
    assert "text/plain" in service.supported_mime_types()


async def test_invalid_chunking_is_rejected_at_construction(container):
    chunking = ChunkingSettings(chunk_size=10, chunk_overlap=10)
    with pytest.raises(InvalidConfiguration):
        DocumentProcessingService(
            metadata_store=container.metadata_store,
            vector_store=container.vector_store,
            embedding_service=container.embedding_service,
            chunking=chunking,
        )
