"""Embedding models for document ingestion."""

from typing import List

from pydantic import BaseModel, Field


class EmbeddingUsage(BaseModel):
    """Token counters reported by the embedding provider."""

    prompt_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    def __add__(self, other: "EmbeddingUsage") -> "EmbeddingUsage":
        return EmbeddingUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class EmbeddingBatchResult(BaseModel):
    """Vectors for a batch of texts, aligned with the input order."""

    vectors: List[List[float]] = Field(..., description="One vector per input text, in input order")
    dimension: int = Field(..., description="Dimension of the configured model")
    model: str = Field(..., description="Embedding model/deployment used")
    usage: EmbeddingUsage = Field(default_factory=EmbeddingUsage)
