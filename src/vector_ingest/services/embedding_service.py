"""Embedding generation service (provider-agnostic)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from vector_ingest.config import EmbeddingProvider, EmbeddingSettings
from vector_ingest.models.embedding import EmbeddingBatchResult, EmbeddingUsage
from vector_ingest.utils.errors import EmbeddingProviderError, InvalidConfiguration
from vector_ingest.utils.logging import get_logger

logger = get_logger("embedding_service")

DEFAULT_DIMENSION = 1536

MODEL_DIMENSIONS: Dict[str, int] = {
    "text-embedding-ada-002": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
}


def dimension_for_model(model: str) -> int:
    """Vector dimension produced by a known model, 1536 otherwise."""
    return MODEL_DIMENSIONS.get(model, DEFAULT_DIMENSION)


class EmbeddingService:
    """
    Generate embeddings for texts using a configurable provider.

    Providers:
    - openai: OpenAI direct API
    - azure: Azure OpenAI (requires a deployment)

    Inputs larger than ``batch_size`` are sent as consecutive sub-batches, one
    request at a time. A failing sub-batch fails the whole call.
    """

    def __init__(
        self,
        settings: EmbeddingSettings,
        client: Optional[Any] = None,
        batch_size: Optional[int] = None,
    ) -> None:
        self._settings = settings
        self._provider = settings.embedding_provider
        self._model_name = settings.resolved_model_name
        self._batch_size = max(1, batch_size or settings.embedding_batch_size)
        self._client = client  # lazy when not injected

    @property
    def model(self) -> str:
        return self._model_name

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def dimension(self) -> int:
        """Dimension of the configured model (EMBEDDING_DIMENSION wins over the table)."""
        if self._settings.embedding_dimension is not None:
            return self._settings.embedding_dimension
        return dimension_for_model(self._settings.embedding_model)

    def validate_dimension(self, expected: int) -> None:
        """
        Check the model dimension against the vector store's dimension.

        Raises:
            InvalidConfiguration: If the two differ
        """
        if self.dimension != expected:
            raise InvalidConfiguration(
                f"Embedding dimension {self.dimension} of model '{self._model_name}' does not match "
                f"vector store dimension {expected}",
                details={
                    "model": self._model_name,
                    "embedding_dimension": self.dimension,
                    "vector_dimension": expected,
                },
            )

    def _get_client(self):
        """Create the appropriate OpenAI client for the selected provider."""
        if self._client is not None:
            return self._client

        from openai import AsyncAzureOpenAI, AsyncOpenAI

        if self._provider == EmbeddingProvider.OPENAI:
            if not self._settings.openai_api_key:
                raise EmbeddingProviderError(
                    "OPENAI_API_KEY is required when EMBEDDING_PROVIDER=openai",
                    model=self._model_name,
                )
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                timeout=self._settings.embedding_timeout,
            )
            return self._client

        if self._provider == EmbeddingProvider.AZURE:
            if not self._settings.is_configured:
                raise EmbeddingProviderError(
                    "Azure embeddings require AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_API_KEY, and EMBEDDING_DEPLOYMENT_NAME",
                    model=self._model_name,
                )
            self._client = AsyncAzureOpenAI(
                api_key=self._settings.azure_openai_api_key,
                azure_endpoint=self._settings.azure_openai_endpoint,
                api_version=self._settings.azure_openai_api_version,
                timeout=self._settings.embedding_timeout,
            )
            return self._client

        raise EmbeddingProviderError(
            f"Unsupported embedding provider: {self._provider}", model=self._model_name
        )

    async def _embed_sub_batch(self, inputs: List[str], batch_index: int):
        """Embed one sub-batch. Returns (vectors in input order, usage)."""
        client = self._get_client()
        try:
            resp = await client.embeddings.create(model=self._model_name, input=inputs)
        except Exception as e:
            raise EmbeddingProviderError(
                f"Embedding request failed for batch {batch_index}: {e}",
                model=self._model_name,
                details={"batch_index": batch_index, "batch_size": len(inputs)},
            ) from e

        data = sorted(resp.data, key=lambda d: d.index)
        if len(data) != len(inputs):
            raise EmbeddingProviderError(
                "Embedding response size mismatch",
                model=self._model_name,
                details={"batch_index": batch_index, "expected": len(inputs), "got": len(data)},
            )

        usage = EmbeddingUsage()
        if getattr(resp, "usage", None) is not None:
            usage = EmbeddingUsage(
                prompt_tokens=resp.usage.prompt_tokens or 0,
                total_tokens=resp.usage.total_tokens or 0,
            )
        return [list(d.embedding) for d in data], usage

    async def embed_batch(self, texts: List[str]) -> EmbeddingBatchResult:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: Texts to embed

        Returns:
            EmbeddingBatchResult with one vector per text, in input order

        Raises:
            EmbeddingProviderError: If any sub-batch fails
        """
        if not texts:
            return EmbeddingBatchResult(vectors=[], dimension=self.dimension, model=self._model_name)

        provider_str = self._provider.value if hasattr(self._provider, "value") else str(self._provider)
        logger.info(
            f"Generating embeddings: provider={provider_str}, model={self._model_name}, "
            f"texts={len(texts)}, batch_size={self._batch_size}"
        )

        vectors: List[List[float]] = []
        usage = EmbeddingUsage()
        for batch_index, start in enumerate(range(0, len(texts), self._batch_size)):
            batch = texts[start : start + self._batch_size]
            batch_vectors, batch_usage = await self._embed_sub_batch(batch, batch_index)
            vectors.extend(batch_vectors)
            usage = usage + batch_usage

        logger.info(
            f"Embeddings generated successfully: count={len(vectors)}, "
            f"dimension={len(vectors[0]) if vectors else self.dimension}, "
            f"total_tokens={usage.total_tokens}"
        )
        return EmbeddingBatchResult(
            vectors=vectors,
            dimension=self.dimension,
            model=self._model_name,
            usage=usage,
        )

    async def embed(self, text: str) -> List[float]:
        """Embed a single text."""
        result = await self.embed_batch([text])
        return result.vectors[0]
