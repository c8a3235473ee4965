"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order
- Can create multiple app instances if needed (e.g., for testing)

For local development:
    uvicorn blob_processor.main:app --reload

For production:
    gunicorn blob_processor.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import blobs, health
from .config.settings import Settings, get_settings
from .core.blobs.gateway import CONTAINER_NAME, BlobGateway, BlobStore
from .core.blobs.models import StorageError
from .infrastructure.storage.client import create_blob_store

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level.upper(),
    )


async def prepare_container(store: BlobStore) -> None:
    """Create the container, logging instead of raising on failure."""
    try:
        await store.ensure_container()
    except StorageError as e:
        logger.error(
            "Unable to prepare blob container",
            extra={"container": CONTAINER_NAME, "kind": e.kind.value, "error": e.message}
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the blob store and gateway on startup and closes the store on
    shutdown. Handlers get the gateway through dependency injection, so
    there is no module-level client.

    Container creation runs as a background task. Startup doesn't wait for
    it, so an unreachable account can't hold the process in SDK retries.
    """
    # Startup
    settings: Settings = app.state.settings

    logger.info(
        "Blob Processor API starting",
        extra={
            "version": __version__,
            "backend": settings.backend,
            "container": CONTAINER_NAME,
        }
    )

    # Validate configuration
    missing_fields = settings.validate_required_fields()
    if "AzureWebJobsStorage" in missing_fields:
        logger.error("Unable to get connection string")
    elif missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    store = create_blob_store(settings)

    # With config missing there is nothing to connect to; requests will
    # report the problem and /health/ready stays not_ready.
    container_task: Optional[asyncio.Task] = None
    if not missing_fields:
        container_task = asyncio.create_task(prepare_container(store))

    app.state.blob_gateway = BlobGateway(store)

    yield

    # Shutdown
    logger.info("Blob Processor API shutting down")
    app.state.blob_gateway = None
    if container_task is not None and not container_task.done():
        container_task.cancel()
        with suppress(asyncio.CancelledError):
            await container_task
    await store.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Tests pass their own
    Settings; in production they come from the environment.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        HTTP API over a cloud object-storage container.

        ## Endpoints

        - `GET /blobs`: list blob names
        - `GET /blobs/{name}/exists`: check existence
        - `POST /blobs/{name}`: upload the raw request body (overwrites)
        - `GET /blobs/{name}`: download
        - `PUT /blobs/{name}`: replace an existing blob
        - `DELETE /blobs/{name}`: delete
        - `GET /blobs/{name}/sas`: read-only signed URL, valid one hour

        Endpoints are anonymous.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        blobs.router,
        prefix="/blobs",
        tags=["Blobs"],
    )

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Storage failures are already turned into responses by the routes,
        so anything reaching here is a bug. We log the full error
        server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


def build_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    return create_app(settings)


# Create the application instance
# This is what uvicorn/gunicorn will import
app = build_app()


# For debugging/development
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "blob_processor.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
