"""Document loaders for the supported file types.

Loaders form a closed set (``DocumentType``). ``get_loader`` resolves a MIME
type to the first variant whose ``supports`` predicate matches.
"""

import asyncio
import io
import os
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

import PyPDF2

from vector_ingest.models.document import DocumentMetadata, LoadedDocument
from vector_ingest.utils.errors import DocumentLoadError, UnsupportedDocumentType
from vector_ingest.utils.logging import get_logger

logger = get_logger("document_loader")

PAGE_SEPARATOR = "\n\n"


def resolve_locator(locator: str) -> Path:
    """Turn a storage locator (plain path or ``file://`` URL) into a local path."""
    if locator.startswith("file://"):
        return Path(locator[len("file://") :])
    return Path(locator)


async def read_bytes(locator: str) -> bytes:
    """Read the bytes behind a locator without blocking the event loop."""
    path = resolve_locator(locator)
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise DocumentLoadError(
            f"Failed to read document at {locator}: {e}",
            locator=locator,
        ) from e


class PdfDocumentLoader:
    """
    Loader for PDF files.

    Uses PyPDF2 to extract text page by page. Pages are joined with a blank
    line and the start offset of each page is recorded so chunks can be
    attributed to a page.
    """

    mime_types: Tuple[str, ...] = ("application/pdf",)

    def supports(self, mime_type: str) -> bool:
        return mime_type.lower() in self.mime_types

    async def load(self, locator: str) -> LoadedDocument:
        """
        Load and parse a PDF document.

        Raises:
            DocumentLoadError: If the file cannot be read or is not a valid PDF
        """
        data = await read_bytes(locator)
        try:
            return await asyncio.to_thread(self._parse, data, locator)
        except DocumentLoadError:
            raise
        except Exception as e:
            raise DocumentLoadError(
                f"Failed to load PDF document: {e}",
                locator=locator,
            ) from e

    def _parse(self, data: bytes, locator: str) -> LoadedDocument:
        reader = PyPDF2.PdfReader(io.BytesIO(data))

        parts: List[str] = []
        page_offsets: List[int] = []
        offset = 0
        for page in reader.pages:
            page_text = page.extract_text() or ""
            if parts:
                offset += len(PAGE_SEPARATOR)
            page_offsets.append(offset)
            parts.append(page_text)
            offset += len(page_text)

        text = PAGE_SEPARATOR.join(parts)
        info = reader.metadata or {}
        pdf_version: Optional[str] = None
        header = getattr(reader, "pdf_header", None)
        if header:
            pdf_version = str(header).replace("%PDF-", "")

        metadata = DocumentMetadata(
            file_name=os.path.basename(str(resolve_locator(locator))) or "unknown",
            mime_type="application/pdf",
            page_count=len(reader.pages),
            character_count=len(text),
            title=str(info["/Title"]) if info.get("/Title") else None,
            author=str(info["/Author"]) if info.get("/Author") else None,
            pdf_version=pdf_version,
        )
        logger.info(
            f"Parsed PDF: {metadata.file_name}, pages={metadata.page_count}, chars={metadata.character_count}"
        )
        return LoadedDocument(text=text, metadata=metadata, page_offsets=page_offsets)


class TextDocumentLoader:
    """Loader for plain text and markdown files."""

    mime_types: Tuple[str, ...] = ("text/plain", "text/markdown")
    encodings: Tuple[str, ...] = ("utf-8", "cp1252", "latin-1")

    def supports(self, mime_type: str) -> bool:
        return mime_type.lower() in self.mime_types

    async def load(self, locator: str) -> LoadedDocument:
        data = await read_bytes(locator)

        text: Optional[str] = None
        used_encoding: Optional[str] = None
        for encoding in self.encodings:
            try:
                text = data.decode(encoding)
                used_encoding = encoding
                break
            except UnicodeDecodeError:
                continue

        if text is None:
            raise DocumentLoadError(
                "Failed to decode text file. Unsupported encoding.",
                locator=locator,
            )

        if text.startswith("\ufeff"):
            text = text[1:]

        path = resolve_locator(locator)
        mime_type = "text/markdown" if path.suffix.lower() in (".md", ".markdown") else "text/plain"
        metadata = DocumentMetadata(
            file_name=path.name or "unknown",
            mime_type=mime_type,
            character_count=len(text),
            encoding=used_encoding,
        )
        return LoadedDocument(text=text, metadata=metadata)


class DocumentType(str, Enum):
    """Closed set of loader variants, in lookup order."""

    PDF = "pdf"
    TEXT = "text"

    def loader(self):
        if self is DocumentType.PDF:
            return PdfDocumentLoader()
        return TextDocumentLoader()


def supported_mime_types() -> List[str]:
    """All MIME types handled by some variant, in lookup order."""
    mime_types: List[str] = []
    for document_type in DocumentType:
        mime_types.extend(document_type.loader().mime_types)
    return mime_types


def get_loader(mime_type: str):
    """
    Get the loader for a MIME type.

    Raises:
        UnsupportedDocumentType: If no variant supports the MIME type
    """
    for document_type in DocumentType:
        loader = document_type.loader()
        if loader.supports(mime_type):
            return loader

    raise UnsupportedDocumentType(mime_type, supported_types=supported_mime_types())


def is_supported(mime_type: str) -> bool:
    return any(document_type.loader().supports(mime_type) for document_type in DocumentType)
