"""Vector store models."""

from typing import List, Optional

from pydantic import BaseModel, Field


class VectorEntry(BaseModel):
    """A vector correlated with a chunk by (file_id, chunk_index)."""

    file_id: str
    chunk_index: int = Field(..., ge=0)
    page_number: Optional[int] = None
    chunk_strategy: str
    vector: List[float]
    created_at: int = Field(..., description="Epoch milliseconds")
    embedding_version: Optional[int] = None


class InsertResult(BaseModel):
    """Outcome of a batched vector insert."""

    inserted_count: int
    inserted_ids: List[str] = Field(default_factory=list)


class StoredVector(BaseModel):
    """Vector entry as read back from the store (vector omitted)."""

    id: str
    file_id: str
    chunk_index: int
    page_number: Optional[int] = None
    chunk_strategy: str
    created_at: int
    embedding_version: Optional[int] = None


class VectorSearchResult(StoredVector):
    """A similarity search hit."""

    score: float


class CollectionInfo(BaseModel):
    """Summary of the provisioned collection."""

    collection_name: str
    points_count: int
    dimension: Optional[int] = None
    distance: Optional[str] = None
