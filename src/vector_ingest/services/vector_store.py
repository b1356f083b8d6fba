"""Qdrant gateway for chunk vectors."""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Dict, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    HnswConfigDiff,
    MatchValue,
    PayloadSchemaType,
    PointStruct,
    VectorParams,
)

from vector_ingest.config import QdrantSettings
from vector_ingest.models.vector import (
    CollectionInfo,
    InsertResult,
    StoredVector,
    VectorEntry,
    VectorSearchResult,
)
from vector_ingest.utils.errors import CollectionNotReady, VectorWriteError
from vector_ingest.utils.logging import get_logger

logger = get_logger("vector_store")

# Deterministic namespace for generating stable point IDs from (file_id, chunk_index)
_POINT_ID_NAMESPACE = uuid.UUID("6b9c7d68-4b93-4c9c-9d83-0b6c68dbb4d9")

_DISTANCES = {
    "cosine": Distance.COSINE,
    "dot": Distance.DOT,
    "euclid": Distance.EUCLID,
}

_SCROLL_PAGE_SIZE = 256


def make_point_id(file_id: str, chunk_index: int) -> str:
    """Create a stable UUID point id for a chunk."""
    return str(uuid.uuid5(_POINT_ID_NAMESPACE, f"{file_id}:{chunk_index}"))


def _file_filter(file_id: str) -> Filter:
    return Filter(must=[FieldCondition(key="file_id", match=MatchValue(value=file_id))])


def _to_stored(point: Any) -> Dict[str, Any]:
    payload = point.payload or {}
    return {
        "id": str(point.id),
        "file_id": payload.get("file_id", ""),
        "chunk_index": payload.get("chunk_index", 0),
        "page_number": payload.get("page_number"),
        "chunk_strategy": payload.get("chunk_strategy", ""),
        "created_at": payload.get("created_at", 0),
        "embedding_version": payload.get("embedding_version"),
    }


class QdrantVectorStore:
    """
    Store chunk vectors in a single Qdrant collection.

    The collection is provisioned administratively (``ensure_collection``);
    writes never create it. Points are keyed by a UUID derived from
    ``(file_id, chunk_index)`` so re-inserting a chunk overwrites its vector.
    The client is synchronous and every call runs in a worker thread.
    """

    def __init__(self, settings: QdrantSettings, client: Optional[QdrantClient] = None) -> None:
        self._settings = settings
        self._collection_name = settings.collection_name
        self._client = client  # lazy when not injected

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def dimension(self) -> int:
        return self._settings.vector_dimension

    def _get_client(self) -> QdrantClient:
        if self._client is not None:
            return self._client

        self._client = QdrantClient(
            url=self._settings.url,
            api_key=self._settings.api_key,
            timeout=self._settings.timeout,
        )
        return self._client

    async def collection_exists(self) -> bool:
        client = self._get_client()
        return await asyncio.to_thread(client.collection_exists, self._collection_name)

    async def ensure_collection(self) -> bool:
        """
        Provision the collection and its payload indexes if missing.

        Returns:
            True if the collection was created, False if it already existed

        Raises:
            VectorWriteError: If provisioning fails or an existing collection has another dimension
        """

        def _ensure() -> bool:
            client = self._get_client()
            if client.collection_exists(self._collection_name):
                info = client.get_collection(self._collection_name)
                current_size = getattr(info.config.params.vectors, "size", None)
                if current_size is not None and int(current_size) != self.dimension:
                    raise VectorWriteError(
                        "Qdrant collection vector size mismatch",
                        details={
                            "collection": self._collection_name,
                            "expected": self.dimension,
                            "actual": int(current_size),
                        },
                    )
                return False

            client.create_collection(
                collection_name=self._collection_name,
                vectors_config=VectorParams(
                    size=self.dimension,
                    distance=_DISTANCES[self._settings.distance],
                ),
                hnsw_config=HnswConfigDiff(
                    m=self._settings.hnsw_m,
                    ef_construct=self._settings.hnsw_ef_construct,
                ),
            )
            client.create_payload_index(
                collection_name=self._collection_name,
                field_name="file_id",
                field_schema=PayloadSchemaType.KEYWORD,
            )
            client.create_payload_index(
                collection_name=self._collection_name,
                field_name="chunk_index",
                field_schema=PayloadSchemaType.INTEGER,
            )
            return True

        try:
            created = await asyncio.to_thread(_ensure)
        except VectorWriteError:
            raise
        except Exception as e:
            raise VectorWriteError(
                "Failed to ensure Qdrant collection",
                details={"collection": self._collection_name, "error": str(e)},
            ) from e

        logger.info(
            f"Qdrant collection ensured: {self._collection_name} "
            f"(vector_size={self.dimension}, created={created})"
        )
        return created

    async def drop_collection(self) -> bool:
        client = self._get_client()
        dropped = await asyncio.to_thread(client.delete_collection, self._collection_name)
        logger.info(f"Qdrant collection dropped: {self._collection_name}")
        return bool(dropped)

    async def collection_info(self) -> CollectionInfo:
        """Points count, dimension and metric of the collection."""
        if not await self.collection_exists():
            raise CollectionNotReady(self._collection_name)

        client = self._get_client()
        info = await asyncio.to_thread(client.get_collection, self._collection_name)
        vectors = info.config.params.vectors
        distance = getattr(vectors, "distance", None)
        return CollectionInfo(
            collection_name=self._collection_name,
            points_count=info.points_count or 0,
            dimension=getattr(vectors, "size", None),
            distance=distance.value if hasattr(distance, "value") else distance,
        )

    async def insert_vectors(self, entries: List[VectorEntry]) -> InsertResult:
        """
        Insert one point per entry in a single batched upsert.

        Raises:
            CollectionNotReady: If the collection has not been provisioned
            VectorWriteError: If Qdrant rejects the write
        """
        if not entries:
            return InsertResult(inserted_count=0, inserted_ids=[])

        def _upsert() -> List[str]:
            client = self._get_client()
            if not client.collection_exists(self._collection_name):
                raise CollectionNotReady(self._collection_name)

            points: List[PointStruct] = []
            point_ids: List[str] = []

            for entry in entries:
                pid = make_point_id(entry.file_id, entry.chunk_index)
                payload: Dict[str, Any] = {
                    "file_id": entry.file_id,
                    "chunk_index": entry.chunk_index,
                    "page_number": entry.page_number,
                    "chunk_strategy": entry.chunk_strategy,
                    "created_at": entry.created_at,
                    "embedding_version": entry.embedding_version,
                }
                points.append(PointStruct(id=pid, vector=entry.vector, payload=payload))
                point_ids.append(pid)

            client.upsert(collection_name=self._collection_name, points=points, wait=True)
            return point_ids

        try:
            point_ids = await asyncio.to_thread(_upsert)
        except CollectionNotReady:
            raise
        except Exception as e:
            raise VectorWriteError(
                "Failed to upsert vectors into Qdrant",
                details={"collection": self._collection_name, "error": str(e)},
            ) from e

        logger.info(
            f"Qdrant upsert complete: collection={self._collection_name}, points={len(point_ids)}"
        )
        return InsertResult(inserted_count=len(point_ids), inserted_ids=point_ids)

    async def search(
        self,
        query_vector: List[float],
        top_k: int = 10,
        file_id: Optional[str] = None,
    ) -> List[VectorSearchResult]:
        """Nearest neighbours of ``query_vector``, optionally restricted to one file."""
        client = self._get_client()
        response = await asyncio.to_thread(
            client.query_points,
            collection_name=self._collection_name,
            query=query_vector,
            query_filter=_file_filter(file_id) if file_id else None,
            limit=top_k,
            with_payload=True,
        )
        return [VectorSearchResult(score=p.score, **_to_stored(p)) for p in response.points]

    async def search_by_file(
        self, file_id: str, query_vector: List[float], top_k: int = 10
    ) -> List[VectorSearchResult]:
        return await self.search(query_vector, top_k=top_k, file_id=file_id)

    async def get_by_file(self, file_id: str) -> List[StoredVector]:
        """All entries of a file, ordered by chunk index."""

        def _scroll() -> List[Any]:
            client = self._get_client()
            collected: List[Any] = []
            offset = None
            while True:
                points, offset = client.scroll(
                    collection_name=self._collection_name,
                    scroll_filter=_file_filter(file_id),
                    limit=_SCROLL_PAGE_SIZE,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                collected.extend(points)
                if offset is None:
                    return collected

        points = await asyncio.to_thread(_scroll)
        stored = [StoredVector(**_to_stored(p)) for p in points]
        return sorted(stored, key=lambda v: v.chunk_index)

    async def count_by_file(self, file_id: str) -> int:
        client = self._get_client()
        result = await asyncio.to_thread(
            client.count,
            collection_name=self._collection_name,
            count_filter=_file_filter(file_id),
            exact=True,
        )
        return result.count

    async def delete_by_file(self, file_id: str) -> int:
        """Delete every entry of a file. Returns how many were removed."""
        existing = await self.count_by_file(file_id)
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.delete,
                collection_name=self._collection_name,
                points_selector=FilterSelector(filter=_file_filter(file_id)),
                wait=True,
            )
        except Exception as e:
            raise VectorWriteError(
                "Failed to delete vectors from Qdrant",
                details={"collection": self._collection_name, "file_id": file_id, "error": str(e)},
            ) from e
        logger.info(f"Deleted {existing} vectors for file {file_id}")
        return existing

    async def check_connection(self) -> bool:
        """Readiness probe."""
        client = self._get_client()
        try:
            await asyncio.to_thread(client.get_collections)
            return True
        except Exception as e:
            logger.warning(f"Qdrant connection check failed: {e}")
            return False
