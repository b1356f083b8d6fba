"""Custom exception classes for the ingestion pipeline."""

from typing import Any, Dict, List, Optional


class IngestionException(Exception):
    """Base exception for all ingestion errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "status_code": self.status_code,
                "details": self.details,
            }
        }


class InvalidConfiguration(IngestionException):
    """Raised for configuration the pipeline cannot run with (chunk window, dimensions)."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            code="INVALID_CONFIGURATION",
            details=details,
        )


class UnsupportedDocumentType(IngestionException):
    """Raised when no loader variant supports a MIME type."""

    def __init__(
        self,
        mime_type: str,
        supported_types: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.mime_type = mime_type
        self.supported_types = list(supported_types or [])
        error_details = details or {}
        error_details["mime_type"] = mime_type
        error_details["supported_types"] = self.supported_types
        super().__init__(
            message=(
                f"No document loader found for MIME type: {mime_type}. "
                f"Supported types: {', '.join(self.supported_types) or 'none'}"
            ),
            status_code=415,
            code="UNSUPPORTED_DOCUMENT_TYPE",
            details=error_details,
        )


class DocumentLoadError(IngestionException):
    """Raised when a document cannot be read or parsed."""

    def __init__(
        self,
        message: str = "Document loading failed",
        locator: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if locator:
            error_details["locator"] = locator
        super().__init__(
            message=message,
            status_code=422,
            code="DOCUMENT_LOAD_ERROR",
            details=error_details,
        )


class EmptyDocument(IngestionException):
    """Raised when a document yields no chunks."""

    def __init__(
        self,
        message: str = "No chunks created from document. Document may be empty.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=422,
            code="EMPTY_DOCUMENT",
            details=details,
        )


class EmbeddingProviderError(IngestionException):
    """Raised for embedding generation errors."""

    def __init__(
        self,
        message: str = "Embedding generation failed",
        model: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if model:
            error_details["model"] = model
        super().__init__(
            message=message,
            status_code=502,
            code="EMBEDDING_PROVIDER_ERROR",
            details=error_details,
        )


class MetadataStoreError(IngestionException):
    """Raised when a relational store read fails."""

    def __init__(
        self,
        message: str = "Metadata store operation failed",
        details: Optional[Dict[str, Any]] = None,
        code: str = "METADATA_STORE_ERROR",
    ):
        super().__init__(
            message=message,
            status_code=502,
            code=code,
            details=details,
        )


class MetadataWriteError(MetadataStoreError):
    """Raised when the relational store rejects a write."""

    def __init__(
        self,
        message: str = "Metadata store write failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            details=details,
            code="METADATA_WRITE_ERROR",
        )


class VectorWriteError(IngestionException):
    """Raised when the vector store rejects a write."""

    def __init__(
        self,
        message: str = "Vector store write failed",
        details: Optional[Dict[str, Any]] = None,
        code: str = "VECTOR_WRITE_ERROR",
    ):
        super().__init__(
            message=message,
            status_code=502,
            code=code,
            details=details,
        )


class CollectionNotReady(VectorWriteError):
    """Raised when the target vector collection has not been provisioned."""

    def __init__(
        self,
        collection_name: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.collection_name = collection_name
        error_details = details or {}
        error_details["collection"] = collection_name
        super().__init__(
            message=f"Collection {collection_name} does not exist. Please create it first.",
            details=error_details,
            code="COLLECTION_NOT_READY",
        )


class NotFoundError(IngestionException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id:
            message += f" with id: {resource_id}"
        error_details = details or {}
        error_details["resource"] = resource
        if resource_id:
            error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            status_code=404,
            code="NOT_FOUND",
            details=error_details,
        )
