"""FastAPI dependencies resolving services from application state."""

from fastapi import Request

from vector_ingest.services.container import ServiceContainer
from vector_ingest.services.metadata_store import MetadataStore


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_metadata_store(request: Request) -> MetadataStore:
    return get_container(request).metadata_store
