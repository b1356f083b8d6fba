"""Tests for exception handling."""

from vector_ingest.utils.errors import (
    CollectionNotReady,
    DocumentLoadError,
    EmbeddingProviderError,
    EmptyDocument,
    IngestionException,
    InvalidConfiguration,
    MetadataStoreError,
    MetadataWriteError,
    NotFoundError,
    UnsupportedDocumentType,
    VectorWriteError,
)


def test_ingestion_exception():
    """Test base IngestionException."""
    exc = IngestionException("Test error", status_code=400, code="TEST_ERROR")
    assert exc.message == "Test error"
    assert exc.status_code == 400
    assert exc.code == "TEST_ERROR"
    assert exc.to_dict()["error"]["message"] == "Test error"


def test_code_defaults_to_class_name():
    assert IngestionException("x").code == "IngestionException"


def test_unsupported_document_type():
    exc = UnsupportedDocumentType("image/png", supported_types=["application/pdf"])
    assert exc.status_code == 415
    assert exc.message == (
        "No document loader found for MIME type: image/png. Supported types: application/pdf"
    )
    assert exc.details == {"mime_type": "image/png", "supported_types": ["application/pdf"]}


def test_empty_document_message():
    assert EmptyDocument().message == "No chunks created from document. Document may be empty."
    assert EmptyDocument().code == "EMPTY_DOCUMENT"


def test_collection_not_ready_is_a_vector_write_error():
    exc = CollectionNotReady("chunks")
    assert isinstance(exc, VectorWriteError)
    assert exc.code == "COLLECTION_NOT_READY"
    assert exc.collection_name == "chunks"
    assert exc.message == "Collection chunks does not exist. Please create it first."


def test_write_errors_codes():
    assert VectorWriteError().code == "VECTOR_WRITE_ERROR"
    assert MetadataWriteError().code == "METADATA_WRITE_ERROR"
    assert isinstance(MetadataWriteError(), MetadataStoreError)
    assert InvalidConfiguration().code == "INVALID_CONFIGURATION"


def test_details_carry_context():
    assert DocumentLoadError("bad", locator="/tmp/a.pdf").details == {"locator": "/tmp/a.pdf"}
    assert EmbeddingProviderError("down", model="m").details == {"model": "m"}


def test_not_found_error():
    exc = NotFoundError("Queue item", "q1")
    assert exc.status_code == 404
    assert exc.message == "Queue item not found with id: q1"
