"""Queue models: status state machine and response DTOs."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QueueStatus(str, Enum):
    """Processing lifecycle of a queue item."""

    QUEUED = "queued"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (QueueStatus.SUCCESS, QueueStatus.ERROR)


class ProcessingResult(BaseModel):
    """Result of running the pipeline for one file."""

    file_id: str
    chunks_created: int
    vectors_inserted: int
    processing_time_ms: int


class FileSummary(BaseModel):
    """File fields exposed alongside a queue item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    mime_type: str
    size: int


class QueueItemResponse(BaseModel):
    """Queue item as exposed by the status API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    file_id: str
    status: QueueStatus
    last_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    file: Optional[FileSummary] = None


class QueueListResponse(BaseModel):
    items: List[QueueItemResponse]
    total: int


class QueueStatsResponse(BaseModel):
    """Counts of queue items per status."""

    queued: int = 0
    processing: int = 0
    success: int = 0
    error: int = 0
    total: int = 0


class ChunkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_id: str
    chunk_index: int
    text: str
    page_number: Optional[int] = None
    chunk_strategy: str
    start_char: Optional[int] = None
    end_char: Optional[int] = None
    created_at: datetime


class ChunkListResponse(BaseModel):
    items: List[ChunkResponse]
    total: int = Field(..., ge=0)
