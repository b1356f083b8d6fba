"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from vector_ingest.config import get_settings
from vector_ingest.database.connection import check_connection
from vector_ingest.utils.logging import get_logger

logger = get_logger("health")

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """
    Health check endpoint.

    Does not check external dependencies; healthy whenever the process is up.
    """
    settings = get_settings()
    logger.debug("Health check requested")
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "environment": settings.environment.value,
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Checks connectivity to:
    - the relational store (chunks + queue)
    - Qdrant (vectors)

    and reports whether embeddings are configured. Returns 503 when the
    relational store or Qdrant is unavailable.
    """
    settings = get_settings()
    container = request.app.state.container
    logger.debug("Readiness check requested")

    checks = {
        "database": await check_connection(container.engine),
        "qdrant": await container.vector_store.check_connection(),
        "embeddings": settings.embedding.is_configured,
    }
    worker = getattr(request.app.state, "worker", None)

    body = {
        "status": "ready",
        "app_name": settings.app_name,
        "environment": settings.environment.value,
        "checks": checks,
        "worker": worker.status() if worker is not None else None,
    }

    if not (checks["database"] and checks["qdrant"]):
        logger.warning(f"Readiness check failed (critical): {checks}")
        body["status"] = "not_ready"
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)

    if not checks["embeddings"]:
        logger.warning(f"Readiness check partial (embeddings not configured): {checks}")

    return body
