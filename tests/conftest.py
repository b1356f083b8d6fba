"""Pytest configuration and fixtures."""

import asyncio
from types import SimpleNamespace
from typing import List, Optional

import pytest
from qdrant_client import QdrantClient

from vector_ingest.config import (
    ChunkingSettings,
    DatabaseSettings,
    EmbeddingSettings,
    QdrantSettings,
    Settings,
    WorkerSettings,
)
from vector_ingest.database import create_engine, create_session_factory, init_models
from vector_ingest.services.container import ServiceContainer
from vector_ingest.services.embedding_service import EmbeddingService
from vector_ingest.services.metadata_store import MetadataStore
from vector_ingest.services.vector_store import QdrantVectorStore

# Test database URL (in-memory SQLite for unit tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_DIMENSION = 8


class FakeEmbeddings:
    """Stand-in for ``client.embeddings`` of the OpenAI SDK."""

    def __init__(
        self,
        dimension: int,
        fail_on_call: Optional[int] = None,
        reverse: bool = False,
        delay: float = 0.0,
    ):
        self.dimension = dimension
        self.delay = delay
        self.fail_on_call = fail_on_call
        self.reverse = reverse
        self.calls: List[List[str]] = []

    async def create(self, model: str, input: List[str]):
        self.calls.append(list(input))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("provider unavailable")

        data = [
            SimpleNamespace(index=i, embedding=vector_for(text, self.dimension))
            for i, text in enumerate(input)
        ]
        if self.reverse:
            data.reverse()
        tokens = sum(len(text.split()) for text in input)
        return SimpleNamespace(
            data=data,
            usage=SimpleNamespace(prompt_tokens=tokens, total_tokens=tokens),
        )


class FakeEmbeddingClient:
    def __init__(self, dimension: int = TEST_DIMENSION, **kwargs):
        self.embeddings = FakeEmbeddings(dimension, **kwargs)


def vector_for(text: str, dimension: int = TEST_DIMENSION) -> List[float]:
    """Deterministic non-zero vector derived from the text."""
    return [float(len(text) + 1)] + [float((ord(text[0]) if text else 1) % 7 + i + 1) for i in range(dimension - 1)]


def make_pdf(pages: List[str]) -> bytes:
    """Build a minimal PDF with one text line per page."""
    objects: List[bytes] = []
    page_ids = [4 + 2 * i for i in range(len(pages))]

    objects.append(b"<< /Type /Catalog /Pages 2 0 R >>")
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode())
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    for pid, text in zip(page_ids, pages):
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {pid + 1} 0 R >>".encode()
        )
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(
            b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(out)


@pytest.fixture
def settings():
    """Settings wired for in-memory stores and a small vector dimension."""
    return Settings(
        database=DatabaseSettings(url=TEST_DATABASE_URL),
        qdrant=QdrantSettings(collection_name="test_chunks", vector_dimension=TEST_DIMENSION),
        embedding=EmbeddingSettings(
            openai_api_key="test-key",
            embedding_model="text-embedding-3-small",
            embedding_dimension=TEST_DIMENSION,
            embedding_batch_size=100,
        ),
        chunking=ChunkingSettings(chunk_size=10, chunk_overlap=0),
        worker=WorkerSettings(poll_interval=0.01, enabled=False),
    )


@pytest.fixture
async def engine(settings):
    """Create test database engine with all tables."""
    engine = create_engine(settings.database)
    await init_models(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def metadata_store(session_factory):
    return MetadataStore(session_factory)


@pytest.fixture
def qdrant_client():
    client = QdrantClient(location=":memory:")
    yield client
    client.close()


@pytest.fixture
async def vector_store(settings, qdrant_client):
    """Vector store with its collection provisioned."""
    store = QdrantVectorStore(settings.qdrant, client=qdrant_client)
    await store.ensure_collection()
    return store


@pytest.fixture
def embedding_client():
    return FakeEmbeddingClient()


@pytest.fixture
def embedding_service(settings, embedding_client):
    return EmbeddingService(settings.embedding, client=embedding_client)


@pytest.fixture
async def container(settings, engine, qdrant_client, embedding_client, vector_store):
    return ServiceContainer.build(
        settings,
        engine=engine,
        qdrant_client=qdrant_client,
        embedding_client=embedding_client,
    )


@pytest.fixture
def text_file(tmp_path):
    """25 characters of text: three windows at size 10, overlap 0."""
    path = tmp_path / "sample.txt"
    path.write_text("abcdefghijklmnopqrstuvwxy", encoding="utf-8")
    return path


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "sample.pdf"
    path.write_bytes(make_pdf(["Hello page one", "Second page text"]))
    return path
