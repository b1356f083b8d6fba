"""Document models for loaded content."""

from bisect import bisect_right
from typing import List, Optional

from pydantic import BaseModel, Field


class DocumentMetadata(BaseModel):
    """Structural metadata extracted from a document."""

    file_name: str = Field(..., description="Base name of the loaded file")
    mime_type: str = Field(..., description="MIME type the loader handled")
    page_count: Optional[int] = Field(None, description="Number of pages (for PDF)")
    character_count: Optional[int] = Field(None, description="Character count of the extracted text")
    title: Optional[str] = Field(None, description="Document title")
    author: Optional[str] = Field(None, description="Document author")
    pdf_version: Optional[str] = Field(None, description="PDF header version")
    encoding: Optional[str] = Field(None, description="Text encoding (for plain text files)")


class LoadedDocument(BaseModel):
    """Extracted text plus metadata returned by a document loader."""

    text: str = Field(..., description="Extracted text content")
    metadata: DocumentMetadata = Field(..., description="Document metadata")
    page_offsets: List[int] = Field(
        default_factory=list,
        description="Character offset at which each page starts (empty when the format has no pages)",
    )

    def page_at(self, offset: int) -> Optional[int]:
        """1-based page containing ``offset``, or None when pages are unknown."""
        if not self.page_offsets:
            return None
        return bisect_right(self.page_offsets, offset) or 1
