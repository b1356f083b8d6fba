"""HTTP API tests against in-memory stores."""

from functools import partial

import pytest
from fastapi.testclient import TestClient
from qdrant_client import QdrantClient

from tests.conftest import FakeEmbeddingClient
from vector_ingest.database import init_models
from vector_ingest.main import create_app
from vector_ingest.models.chunk import ChunkRecord
from vector_ingest.models.queue import QueueStatus
from vector_ingest.services.container import ServiceContainer


@pytest.fixture
def api(settings):
    """TestClient plus the container behind it; async setup runs on the client's loop."""
    qdrant_client = QdrantClient(location=":memory:")
    container = ServiceContainer.build(
        settings, qdrant_client=qdrant_client, embedding_client=FakeEmbeddingClient()
    )
    app = create_app(container=container, run_worker=False)
    with TestClient(app) as client:
        client.portal.call(init_models, container.engine)
        client.portal.call(container.vector_store.ensure_collection)
        yield client, container
        client.portal.call(container.close)
    qdrant_client.close()


def enqueue(client, container, name="doc.txt"):
    return client.portal.call(
        partial(
            container.metadata_store.create_file_with_queue_item,
            name=name,
            url=f"/data/{name}",
            mime_type="text/plain",
            size=42,
        )
    )


def test_root_and_api_info(api):
    client, _ = api
    assert client.get("/").json()["service"] == "vector-ingest"
    assert client.get("/api/v1/").json()["version"] == "v1"


def test_health_check(api):
    client, _ = api
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert client.get("/api/v1/health").status_code == 200


def test_readiness_check(api):
    client, _ = api
    response = client.get("/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["checks"]["database"] is True
    assert body["checks"]["qdrant"] is True


def test_queue_listing_and_stats(api):
    client, container = api
    first = enqueue(client, container, "a.txt")
    enqueue(client, container, "b.txt")
    client.portal.call(container.metadata_store.set_queue_status, first.id, QueueStatus.ERROR, "bad file")

    listing = client.get("/api/v1/queue").json()
    assert listing["total"] == 2
    assert [i["file"]["name"] for i in listing["items"]] == ["a.txt", "b.txt"]

    errors = client.get("/api/v1/queue", params={"status": "error"}).json()
    assert errors["total"] == 1
    assert errors["items"][0]["last_error"] == "bad file"

    stats = client.get("/api/v1/queue/stats").json()
    assert stats == {"queued": 1, "processing": 0, "success": 0, "error": 1, "total": 2}


def test_get_queue_item_by_id_and_file(api):
    client, container = api
    item = enqueue(client, container)

    by_id = client.get(f"/api/v1/queue/{item.id}")
    assert by_id.status_code == 200
    assert by_id.json()["status"] == "queued"
    assert by_id.json()["file"]["size"] == 42

    by_file = client.get(f"/api/v1/queue/file/{item.file_id}")
    assert by_file.json()["id"] == item.id


def test_missing_queue_item_returns_not_found(api):
    client, _ = api
    response = client.get("/api/v1/queue/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_invalid_status_filter_is_a_validation_error(api):
    client, _ = api
    response = client.get("/api/v1/queue", params={"status": "finished"})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_file_chunks(api):
    client, container = api
    item = enqueue(client, container)
    client.portal.call(
        container.metadata_store.create_chunks_batch,
        [
            ChunkRecord(file_id=item.file_id, chunk_index=i, text=f"c{i}", chunk_strategy="fixed-size")
            for i in range(3)
        ],
    )

    body = client.get(f"/api/v1/files/{item.file_id}/chunks").json()
    assert body["total"] == 3
    assert [c["chunk_index"] for c in body["items"]] == [0, 1, 2]

    assert client.get("/api/v1/files/unknown/chunks").status_code == 404


def test_worker_status_when_disabled(api):
    client, _ = api
    assert client.get("/api/v1/worker").json() == {
        "is_running": False,
        "poll_interval": None,
        "enabled": False,
    }
