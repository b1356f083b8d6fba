"""API v1 router aggregation."""

from fastapi import APIRouter, Request

from vector_ingest.api.v1 import health, queue

# Create v1 API router with version prefix
router = APIRouter(
    prefix="/api/v1",
    tags=["v1"],
    responses={
        404: {"description": "Not found"},
        422: {"description": "Validation error"},
        500: {"description": "Internal server error"},
    },
)

router.include_router(health.router)
router.include_router(queue.router)


@router.get(
    "/",
    summary="API Information",
    description="Get API version and status information",
    tags=["v1"],
)
async def api_info():
    """Get API v1 information."""
    return {
        "version": "v1",
        "status": "active",
        "service": "vector-ingest",
        "endpoints": {
            "health": "/api/v1/health",
            "ready": "/api/v1/ready",
            "queue": "/api/v1/queue",
            "queue_stats": "/api/v1/queue/stats",
            "worker": "/api/v1/worker",
        },
    }


@router.get("/worker", tags=["v1"])
async def worker_status(request: Request):
    """State of the in-process queue worker."""
    worker = getattr(request.app.state, "worker", None)
    if worker is None:
        return {"is_running": False, "poll_interval": None, "enabled": False}
    return {**worker.status(), "enabled": True}
