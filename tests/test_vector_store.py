import time
from unittest.mock import MagicMock

import pytest

from tests.conftest import TEST_DIMENSION
from vector_ingest.config import QdrantSettings
from vector_ingest.models.vector import VectorEntry
from vector_ingest.services.vector_store import QdrantVectorStore, make_point_id
from vector_ingest.utils.errors import CollectionNotReady, VectorWriteError


def entries(file_id, count, dimension=TEST_DIMENSION):
    now = int(time.time() * 1000)
    return [
        VectorEntry(
            file_id=file_id,
            chunk_index=i,
            page_number=1,
            chunk_strategy="fixed-size",
            vector=[float(i + 1)] + [1.0] * (dimension - 1),
            created_at=now,
            embedding_version=1,
        )
        for i in range(count)
    ]


async def test_insert_into_missing_collection_raises(settings, qdrant_client):
    store = QdrantVectorStore(settings.qdrant, client=qdrant_client)

    with pytest.raises(CollectionNotReady) as exc_info:
        await store.insert_vectors(entries("f1", 2))

    assert isinstance(exc_info.value, VectorWriteError)
    assert exc_info.value.message == "Collection test_chunks does not exist. Please create it first."
    assert not await store.collection_exists()


async def test_unreachable_qdrant_during_insert_is_a_vector_write_error(settings):
    client = MagicMock()
    client.collection_exists.side_effect = ConnectionError("connection refused")
    store = QdrantVectorStore(settings.qdrant, client=client)

    with pytest.raises(VectorWriteError) as exc_info:
        await store.insert_vectors(entries("f1", 2))

    assert not isinstance(exc_info.value, CollectionNotReady)
    assert exc_info.value.code == "VECTOR_WRITE_ERROR"
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    client.upsert.assert_not_called()


async def test_failed_upsert_is_a_vector_write_error(settings):
    client = MagicMock()
    client.collection_exists.return_value = True
    client.upsert.side_effect = RuntimeError("write rejected")
    store = QdrantVectorStore(settings.qdrant, client=client)

    with pytest.raises(VectorWriteError, match="Failed to upsert"):
        await store.insert_vectors(entries("f1", 2))


async def test_ensure_collection_is_idempotent(settings, qdrant_client):
    store = QdrantVectorStore(settings.qdrant, client=qdrant_client)

    assert await store.ensure_collection() is True
    assert await store.ensure_collection() is False

    info = await store.collection_info()
    assert info.collection_name == "test_chunks"
    assert info.dimension == TEST_DIMENSION
    assert info.points_count == 0


async def test_ensure_collection_rejects_dimension_mismatch(qdrant_client):
    small = QdrantVectorStore(
        QdrantSettings(collection_name="dims", vector_dimension=4), client=qdrant_client
    )
    await small.ensure_collection()
    large = QdrantVectorStore(
        QdrantSettings(collection_name="dims", vector_dimension=8), client=qdrant_client
    )

    with pytest.raises(VectorWriteError, match="size mismatch"):
        await large.ensure_collection()


async def test_insert_returns_deterministic_ids(vector_store):
    result = await vector_store.insert_vectors(entries("f1", 3))

    assert result.inserted_count == 3
    assert result.inserted_ids == [make_point_id("f1", i) for i in range(3)]
    assert await vector_store.count_by_file("f1") == 3


async def test_reinserting_same_chunks_overwrites(vector_store):
    await vector_store.insert_vectors(entries("f1", 3))
    await vector_store.insert_vectors(entries("f1", 3))

    assert await vector_store.count_by_file("f1") == 3


async def test_get_by_file_returns_payload_sorted(vector_store):
    await vector_store.insert_vectors(entries("f1", 4))
    await vector_store.insert_vectors(entries("f2", 2))

    stored = await vector_store.get_by_file("f1")

    assert [v.chunk_index for v in stored] == [0, 1, 2, 3]
    assert {v.file_id for v in stored} == {"f1"}
    assert stored[0].chunk_strategy == "fixed-size"
    assert stored[0].embedding_version == 1


async def test_search_can_be_restricted_to_a_file(vector_store):
    await vector_store.insert_vectors(entries("f1", 3))
    await vector_store.insert_vectors(entries("f2", 3))
    query = [3.0] + [1.0] * (TEST_DIMENSION - 1)

    everywhere = await vector_store.search(query, top_k=10)
    only_f2 = await vector_store.search_by_file("f2", query, top_k=10)

    assert len(everywhere) == 6
    assert len(only_f2) == 3
    assert {hit.file_id for hit in only_f2} == {"f2"}
    assert only_f2[0].chunk_index == 2


async def test_delete_by_file_only_touches_that_file(vector_store):
    await vector_store.insert_vectors(entries("f1", 3))
    await vector_store.insert_vectors(entries("f2", 2))

    assert await vector_store.delete_by_file("f1") == 3
    assert await vector_store.count_by_file("f1") == 0
    assert await vector_store.count_by_file("f2") == 2


async def test_drop_collection(vector_store):
    assert await vector_store.drop_collection() is True
    assert not await vector_store.collection_exists()
    with pytest.raises(CollectionNotReady):
        await vector_store.collection_info()


async def test_empty_insert_is_a_no_op(settings, qdrant_client):
    store = QdrantVectorStore(settings.qdrant, client=qdrant_client)
    result = await store.insert_vectors([])
    assert result.inserted_count == 0
