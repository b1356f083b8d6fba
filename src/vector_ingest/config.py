"""Configuration management using pydantic-settings."""

import warnings
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vector_ingest.models.chunk import ChunkingStrategy


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class DatabaseSettings(BaseSettings):
    """Relational (chunk metadata + queue) store configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_", case_sensitive=False)

    url: str = Field(
        default="sqlite+aiosqlite:///./vector_ingest.db",
        description="Database connection URL. Env var: DATABASE_URL",
    )
    pool_size: int = Field(default=5, description="Connection pool size (ignored for SQLite)")
    max_overflow: int = Field(default=10, description="Maximum pool overflow (ignored for SQLite)")
    echo: bool = Field(default=False, description="Echo SQL queries (for debugging)")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        valid_prefixes = (
            "postgresql://",
            "postgresql+asyncpg://",
            "postgresql+psycopg2://",
            "sqlite://",
            "sqlite+aiosqlite://",
        )
        if not v.startswith(valid_prefixes):
            raise ValueError(f"Database URL must start with one of {list(valid_prefixes)}")
        return v

    @property
    def async_url(self) -> str:
        """Database URL rewritten for an async driver."""
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.url.startswith("postgresql+psycopg2://"):
            return self.url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
        if self.url.startswith("sqlite://"):
            return self.url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return self.url

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_", case_sensitive=False)

    url: str = Field(
        default="http://localhost:6333", description="Qdrant connection URL. Env var: QDRANT_URL"
    )
    api_key: Optional[str] = Field(
        default=None, description="Qdrant API key (for Qdrant Cloud). Env var: QDRANT_API_KEY"
    )
    timeout: int = Field(default=30, description="Request timeout in seconds")
    collection_name: str = Field(
        default="document_chunks",
        description="Collection holding chunk vectors. Env var: QDRANT_COLLECTION_NAME",
    )
    vector_dimension: int = Field(
        default=1536,
        description="Dimension the collection is provisioned with. Env var: QDRANT_VECTOR_DIMENSION",
    )
    distance: str = Field(
        default="cosine", description="Similarity metric: cosine, dot or euclid"
    )
    hnsw_m: int = Field(default=16, description="HNSW connections per layer")
    hnsw_ef_construct: int = Field(default=256, description="HNSW build-time candidate list size")

    @field_validator("distance")
    @classmethod
    def validate_distance(cls, v: str) -> str:
        """Validate similarity metric."""
        valid = ["cosine", "dot", "euclid"]
        if v.lower() not in valid:
            raise ValueError(f"Distance must be one of {valid}")
        return v.lower()

    @property
    def is_cloud(self) -> bool:
        """Check if using Qdrant Cloud (has API key)."""
        return bool(self.api_key)


class EmbeddingProvider(str, Enum):
    """Embedding provider selection."""

    OPENAI = "openai"
    AZURE = "azure"


class EmbeddingSettings(BaseSettings):
    """Embedding configuration (provider-agnostic)."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    embedding_provider: EmbeddingProvider = Field(
        default=EmbeddingProvider.OPENAI,
        description="Embedding provider: openai or azure. Env var: EMBEDDING_PROVIDER",
    )

    # OpenAI (direct) embeddings
    openai_api_key: Optional[str] = Field(
        default=None, description="OpenAI API key. Env var: OPENAI_API_KEY"
    )
    openai_base_url: Optional[str] = Field(
        default=None, description="Optional OpenAI base URL. Env var: OPENAI_BASE_URL"
    )

    # Azure OpenAI embeddings (optional)
    azure_openai_endpoint: Optional[str] = Field(
        default=None, description="Azure OpenAI endpoint URL. Env var: AZURE_OPENAI_ENDPOINT"
    )
    azure_openai_api_key: Optional[str] = Field(
        default=None, description="Azure OpenAI API key. Env var: AZURE_OPENAI_API_KEY"
    )
    azure_openai_api_version: str = Field(
        default="2024-02-15-preview",
        description="Azure OpenAI API version. Env var: AZURE_OPENAI_API_VERSION",
    )
    embedding_deployment_name: Optional[str] = Field(
        default=None,
        description="Embedding deployment name (Azure OpenAI). Env var: EMBEDDING_DEPLOYMENT_NAME",
    )

    # Model configuration
    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model name. Env var: EMBEDDING_MODEL",
    )
    embedding_dimension: Optional[int] = Field(
        default=None,
        description="Overrides the dimension looked up from the model name. Env var: EMBEDDING_DIMENSION",
    )
    embedding_batch_size: int = Field(
        default=100,
        ge=1,
        description="Maximum texts per embedding request. Env var: EMBEDDING_BATCH_SIZE",
    )
    embedding_timeout: float = Field(
        default=30.0,
        description="Embedding request timeout in seconds. Env var: EMBEDDING_TIMEOUT",
    )
    embedding_version: int = Field(
        default=1,
        description="Version stamped on stored vectors. Env var: EMBEDDING_VERSION",
    )

    @property
    def is_configured(self) -> bool:
        """Check if the selected embedding provider is configured."""
        if self.embedding_provider == EmbeddingProvider.OPENAI:
            return bool(self.openai_api_key)
        if self.embedding_provider == EmbeddingProvider.AZURE:
            return bool(
                self.azure_openai_endpoint
                and self.azure_openai_api_key
                and self.embedding_deployment_name
            )
        return False

    @property
    def resolved_model_name(self) -> str:
        """Get the effective model/deployment name to use for embeddings."""
        if self.embedding_provider == EmbeddingProvider.AZURE:
            return self.embedding_deployment_name or ""
        return self.embedding_model


class ChunkingSettings(BaseSettings):
    """Text chunking configuration."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    chunk_size: int = Field(
        default=512, description="Window size in characters. Env var: CHUNK_SIZE"
    )
    chunk_overlap: int = Field(
        default=50, description="Overlap between windows in characters. Env var: CHUNK_OVERLAP"
    )
    chunking_strategy: str = Field(
        default=ChunkingStrategy.FIXED_SIZE.value,
        description="Chunking strategy name. Env var: CHUNKING_STRATEGY",
    )

    @field_validator("chunking_strategy")
    @classmethod
    def validate_chunking_strategy(cls, v: str) -> str:
        """Validate chunking strategy."""
        valid = [s.value for s in ChunkingStrategy]
        if v.lower() not in valid:
            raise ValueError(f"Chunking strategy must be one of {valid}")
        return v.lower()


class WorkerSettings(BaseSettings):
    """Queue worker configuration."""

    model_config = SettingsConfigDict(env_prefix="WORKER_", case_sensitive=False)

    poll_interval: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to sleep between queue polls. Env var: WORKER_POLL_INTERVAL",
    )
    enabled: bool = Field(
        default=True,
        description="Run the worker inside the HTTP service lifespan. Env var: WORKER_ENABLED",
    )
    shutdown_grace_period: float = Field(
        default=30.0,
        ge=0,
        description=(
            "Seconds the HTTP service waits for an item in flight before cancelling the worker. "
            "Env var: WORKER_SHUTDOWN_GRACE_PERIOD"
        ),
    )


class ServerSettings(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    host: str = Field(default="0.0.0.0", description="Server host. Env var: HOST")
    port: int = Field(default=8003, description="HTTP server port. Env var: PORT")
    reload: bool = Field(
        default=False, description="Enable auto-reload (development only). Env var: RELOAD"
    )


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="vector-ingest", description="Application name. Env var: APP_NAME")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment. Env var: ENVIRONMENT",
    )
    debug: bool = Field(default=False, description="Enable debug mode. Env var: DEBUG")
    log_level: str = Field(default="INFO", description="Logging level. Env var: LOG_LEVEL")

    # Sub-settings
    database: Optional[DatabaseSettings] = None
    qdrant: Optional[QdrantSettings] = None
    embedding: Optional[EmbeddingSettings] = None
    chunking: Optional[ChunkingSettings] = None
    worker: Optional[WorkerSettings] = None
    server: Optional[ServerSettings] = None

    @model_validator(mode="after")
    def initialize_nested_settings(self) -> "Settings":
        """Initialize nested settings to ensure they read from environment."""
        if self.database is None:
            self.database = DatabaseSettings()
        if self.qdrant is None:
            self.qdrant = QdrantSettings()
        if self.embedding is None:
            self.embedding = EmbeddingSettings()
        if self.chunking is None:
            self.chunking = ChunkingSettings()
        if self.worker is None:
            self.worker = WorkerSettings()
        if self.server is None:
            self.server = ServerSettings()
        return self

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v):
        """Parse environment from string."""
        if isinstance(v, str):
            try:
                return Environment(v.lower())
            except ValueError:
                return Environment.DEVELOPMENT
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def validate_configuration(self) -> None:
        """Warn about services that are not configured."""
        if not self.embedding.is_configured:
            warnings.warn(
                "Embeddings are not configured. For OpenAI set EMBEDDING_PROVIDER=openai and OPENAI_API_KEY. "
                "For Azure set EMBEDDING_PROVIDER=azure and AZURE_OPENAI_ENDPOINT/AZURE_OPENAI_API_KEY/"
                "EMBEDDING_DEPLOYMENT_NAME.",
                UserWarning,
            )

    def validate_production_settings(self) -> None:
        """Validate that production settings are secure."""
        if self.is_production:
            if self.debug:
                raise ValueError("DEBUG must be False in production")
            if not self.embedding.is_configured:
                raise ValueError(
                    "Embeddings must be configured in production. "
                    "Set OPENAI_API_KEY, or the AZURE_OPENAI_* variables with EMBEDDING_PROVIDER=azure."
                )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.validate_configuration()
        try:
            _settings.validate_production_settings()
        except ValueError as e:
            import logging

            logging.error(f"Configuration validation failed: {e}")
            if _settings.is_production:
                raise
    return _settings


def reset_settings() -> None:
    """Drop the cached settings instance (used by tests)."""
    global _settings
    _settings = None
