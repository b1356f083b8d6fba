"""FastAPI application entry point.

This module creates and configures the FastAPI application instance with:
- Exception handlers
- API routers (v1)
- Health check endpoints (/health, /ready)
- Startup/shutdown lifecycle (service container, in-process queue worker)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vector_ingest import __version__
from vector_ingest.api.v1 import health
from vector_ingest.api.v1.router import router as v1_router
from vector_ingest.config import WorkerSettings, get_settings
from vector_ingest.services.container import ServiceContainer
from vector_ingest.utils.errors import IngestionException
from vector_ingest.utils.logging import get_logger, log_error, setup_logging
from vector_ingest.workers.queue_worker import QueueWorker

# Set up logging first
setup_logging()
logger = get_logger("main")

# Get settings
settings = get_settings()


async def stop_worker(
    worker: QueueWorker, worker_task: asyncio.Task, worker_settings: WorkerSettings
) -> None:
    """
    Stop the in-process worker, letting an item in flight finish.

    The task is cancelled only when it outlives the poll interval plus the
    grace period; the worker then records the interrupted item as ``error``.
    """
    worker.stop()
    timeout = worker_settings.poll_interval + worker_settings.shutdown_grace_period
    try:
        await asyncio.wait_for(worker_task, timeout=timeout)
        logger.info("Queue worker stopped")
    except asyncio.TimeoutError:
        logger.warning(f"Queue worker did not stop within {timeout}s; task cancelled")
    except Exception as e:
        log_error(e, context={"component": "queue_worker", "phase": "shutdown"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Builds the service container unless one was supplied, and runs the queue
    worker as a background task when enabled.
    """
    logger.info("Starting vector-ingest service...")
    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        app.state.container = ServiceContainer.build(settings)
    container: ServiceContainer = app.state.container

    worker_task: Optional[asyncio.Task] = None
    app.state.worker = None
    if app.state.run_worker:
        worker = container.create_worker()
        app.state.worker = worker
        worker_task = asyncio.create_task(worker.start())
        logger.info("Queue worker task started")

    logger.info("vector-ingest service started successfully")
    try:
        yield
    finally:
        logger.info("Shutting down vector-ingest service...")
        if worker_task is not None:
            await stop_worker(app.state.worker, worker_task, container.settings.worker)
        if owns_container:
            await container.close()
            app.state.container = None
        logger.info("vector-ingest service shut down")


def create_app(
    container: Optional[ServiceContainer] = None,
    run_worker: Optional[bool] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Prebuilt services; built from settings at startup when None
        run_worker: Run the queue worker in-process; defaults to WORKER_ENABLED
    """
    app = FastAPI(
        title="Vector Ingest Service",
        description="Queue-driven document chunking and embedding pipeline",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.run_worker = settings.worker.enabled if run_worker is None else run_worker

    @app.exception_handler(IngestionException)
    async def ingestion_exception_handler(request: Request, exc: IngestionException):
        """Handle IngestionException."""
        log_error(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "message": exc.detail,
                    "code": "HTTP_ERROR",
                    "status_code": exc.status_code,
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        log_error(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": {
                    "message": "Validation error",
                    "code": "VALIDATION_ERROR",
                    "status_code": 422,
                    "details": exc.errors(),
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions."""
        log_error(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "message": "Internal server error",
                    "code": "INTERNAL_ERROR",
                    "status_code": 500,
                }
            },
        )

    app.include_router(v1_router)

    # Root-level probes for container orchestration; also under /api/v1
    app.add_api_route("/health", health.health_check, methods=["GET"], include_in_schema=False)
    app.add_api_route("/ready", health.readiness_check, methods=["GET"], include_in_schema=False)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint."""
        return {
            "service": "vector-ingest",
            "version": __version__,
            "status": "running",
            "environment": settings.environment.value,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vector_ingest.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload and settings.is_development,
        log_level=settings.log_level.lower(),
    )
