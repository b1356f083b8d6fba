"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from vector_ingest import config
from vector_ingest.config import (
    ChunkingSettings,
    DatabaseSettings,
    EmbeddingProvider,
    EmbeddingSettings,
    Environment,
    QdrantSettings,
    Settings,
    WorkerSettings,
    get_settings,
    reset_settings,
)
from vector_ingest.services.container import ServiceContainer
from vector_ingest.utils.errors import InvalidConfiguration


def test_chunking_defaults(monkeypatch):
    """Test chunking defaults."""
    monkeypatch.delenv("CHUNK_SIZE", raising=False)
    monkeypatch.delenv("CHUNK_OVERLAP", raising=False)
    settings = ChunkingSettings()
    assert settings.chunk_size == 512
    assert settings.chunk_overlap == 50
    assert settings.chunking_strategy == "fixed-size"


def test_chunking_reads_environment(monkeypatch):
    monkeypatch.setenv("CHUNK_SIZE", "200")
    monkeypatch.setenv("CHUNK_OVERLAP", "20")
    monkeypatch.setenv("CHUNKING_STRATEGY", "FIXED-SIZE")
    settings = ChunkingSettings()
    assert settings.chunk_size == 200
    assert settings.chunk_overlap == 20
    assert settings.chunking_strategy == "fixed-size"


@pytest.mark.parametrize("size,overlap", [(0, 0), (100, 100), (100, -1)])
async def test_invalid_window_from_environment_fails_container_build(
    monkeypatch, settings, engine, qdrant_client, size, overlap
):
    """Bad CHUNK_SIZE/CHUNK_OVERLAP surface as InvalidConfiguration, not a pydantic error."""
    monkeypatch.setenv("CHUNK_SIZE", str(size))
    monkeypatch.setenv("CHUNK_OVERLAP", str(overlap))
    chunking = ChunkingSettings()
    assert (chunking.chunk_size, chunking.chunk_overlap) == (size, overlap)

    invalid = settings.model_copy(update={"chunking": chunking})
    with pytest.raises(InvalidConfiguration) as exc_info:
        ServiceContainer.build(
            invalid, engine=engine, qdrant_client=qdrant_client, embedding_client=object()
        )
    assert exc_info.value.code == "INVALID_CONFIGURATION"


def test_chunking_rejects_unknown_strategy():
    with pytest.raises(ValidationError, match="Chunking strategy must be one of"):
        ChunkingSettings(chunking_strategy="semantic")


def test_database_settings_invalid_url():
    """Test database settings with invalid URL."""
    with pytest.raises(ValueError, match="Database URL must start with"):
        DatabaseSettings(url="mysql://localhost/db")


def test_database_async_url():
    assert (
        DatabaseSettings(url="postgresql://u:p@localhost/db").async_url
        == "postgresql+asyncpg://u:p@localhost/db"
    )
    assert DatabaseSettings(url="sqlite:///./x.db").async_url == "sqlite+aiosqlite:///./x.db"
    assert DatabaseSettings(url="sqlite:///./x.db").is_sqlite


def test_qdrant_settings():
    settings = QdrantSettings(distance="COSINE", api_key="secret")
    assert settings.distance == "cosine"
    assert settings.is_cloud is True
    assert settings.hnsw_m == 16
    assert settings.hnsw_ef_construct == 256
    with pytest.raises(ValueError, match="Distance must be one of"):
        QdrantSettings(distance="manhattan")


def test_embedding_settings_provider_configuration():
    openai = EmbeddingSettings(openai_api_key="sk-test")
    assert openai.is_configured is True
    assert openai.resolved_model_name == "text-embedding-ada-002"
    assert openai.embedding_batch_size == 100

    azure = EmbeddingSettings(
        embedding_provider=EmbeddingProvider.AZURE,
        azure_openai_endpoint="https://example.openai.azure.com",
        azure_openai_api_key="key",
        embedding_deployment_name="embeddings",
    )
    assert azure.is_configured is True
    assert azure.resolved_model_name == "embeddings"


def test_worker_poll_interval_must_be_positive():
    assert WorkerSettings().poll_interval == 5.0
    with pytest.raises(ValidationError):
        WorkerSettings(poll_interval=0)


def test_settings_environment():
    """Test settings environment parsing."""
    assert Settings(environment="production").environment == Environment.PRODUCTION
    assert Settings(environment="unknown").environment == Environment.DEVELOPMENT


def test_nested_settings_are_initialized():
    settings = Settings()
    assert settings.database is not None
    assert settings.qdrant is not None
    assert settings.embedding is not None
    assert settings.chunking is not None
    assert settings.worker is not None
    assert settings.server is not None


def test_production_requires_embeddings():
    settings = Settings(
        environment="production",
        embedding=EmbeddingSettings(openai_api_key=None),
    )
    with pytest.raises(ValueError, match="Embeddings must be configured"):
        settings.validate_production_settings()


def test_get_settings_is_cached():
    reset_settings()
    try:
        assert get_settings() is get_settings()
    finally:
        reset_settings()
    assert config._settings is None


async def test_container_rejects_dimension_mismatch(settings, engine, qdrant_client):
    mismatched = settings.model_copy(
        update={"embedding": EmbeddingSettings(embedding_model="text-embedding-3-large")}
    )
    with pytest.raises(InvalidConfiguration, match="does not match"):
        ServiceContainer.build(mismatched, engine=engine, qdrant_client=qdrant_client, embedding_client=object())
