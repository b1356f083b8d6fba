"""Read-only queue and chunk status endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from vector_ingest.api.v1.dependencies import get_metadata_store
from vector_ingest.models.queue import (
    ChunkListResponse,
    ChunkResponse,
    QueueItemResponse,
    QueueListResponse,
    QueueStatsResponse,
    QueueStatus,
)
from vector_ingest.services.metadata_store import MetadataStore
from vector_ingest.utils.errors import NotFoundError

router = APIRouter(tags=["queue"])


@router.get("/queue", response_model=QueueListResponse)
async def list_queue_items(
    status: Optional[QueueStatus] = Query(default=None, description="Filter by status"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    store: MetadataStore = Depends(get_metadata_store),
):
    """List queue items, oldest first."""
    items = await store.list_queue_items(status=status, skip=skip, limit=limit)
    total = await store.count_queue_items(status=status)
    return QueueListResponse(
        items=[QueueItemResponse.model_validate(item) for item in items],
        total=total,
    )


@router.get("/queue/stats", response_model=QueueStatsResponse)
async def queue_stats(store: MetadataStore = Depends(get_metadata_store)):
    """Counts of queue items per status."""
    return await store.queue_stats()


@router.get("/queue/file/{file_id}", response_model=QueueItemResponse)
async def get_queue_item_by_file(file_id: str, store: MetadataStore = Depends(get_metadata_store)):
    item = await store.get_queue_item_by_file(file_id)
    if item is None:
        raise NotFoundError("Queue item for file", file_id)
    return QueueItemResponse.model_validate(item)


@router.get("/queue/{queue_id}", response_model=QueueItemResponse)
async def get_queue_item(queue_id: str, store: MetadataStore = Depends(get_metadata_store)):
    item = await store.get_queue_item(queue_id)
    if item is None:
        raise NotFoundError("Queue item", queue_id)
    return QueueItemResponse.model_validate(item)


@router.get("/files/{file_id}/chunks", response_model=ChunkListResponse)
async def list_file_chunks(
    file_id: str,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    store: MetadataStore = Depends(get_metadata_store),
):
    """Chunks of a file ordered by chunk index."""
    if await store.get_file(file_id) is None:
        raise NotFoundError("File", file_id)
    chunks = await store.list_chunks(file_id, skip=skip, limit=limit)
    total = await store.count_chunks(file_id)
    return ChunkListResponse(
        items=[ChunkResponse.model_validate(chunk) for chunk in chunks],
        total=total,
    )
