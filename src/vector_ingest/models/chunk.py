"""Chunk models for document ingestion."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ChunkingStrategy(str, Enum):
    """Closed set of chunking algorithms, addressed by their stored name."""

    FIXED_SIZE = "fixed-size"


class ChunkingConfig(BaseModel):
    """Window parameters handed to the chunker (validated by the chunker itself)."""

    window_size: int = Field(..., description="Window size in characters")
    overlap: int = Field(default=0, description="Characters shared by consecutive windows")


class TextChunk(BaseModel):
    """A window of text produced by the chunker."""

    index: int = Field(..., ge=0, description="0-based index of this chunk within the document")
    text: str = Field(..., description="Chunk text content")
    start_char: int = Field(..., ge=0, description="Offset of the first character (inclusive)")
    end_char: int = Field(..., ge=0, description="Offset after the last character (exclusive)")
    strategy_name: str = Field(..., description="Name of the chunking strategy that produced it")
    page_number: Optional[int] = Field(default=None, description="Source page, when known")


class ChunkRecord(BaseModel):
    """Row handed to the metadata store for batch insertion."""

    file_id: str
    chunk_index: int = Field(..., ge=0)
    text: str
    page_number: Optional[int] = None
    chunk_strategy: str
    start_char: Optional[int] = None
    end_char: Optional[int] = None
