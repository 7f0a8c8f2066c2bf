"""FastAPI application for the telestore REST API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from telestore.api.middleware import api_key_middleware
from telestore.api.routes import files, health
from telestore.core.config import TELESTORE_HOST, TELESTORE_PORT
from telestore.core.errors import (
    IndexPersistError,
    InitializationError,
    InvalidPathError,
    ObjectNotFoundError,
    RemoteTransferError,
)
from telestore.core.fs import close_filesystem, open_filesystem

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("telestore API starting up...")
    await open_filesystem()
    yield
    logger.info("telestore API shutting down...")
    await close_filesystem()


async def _bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _remote_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Remote failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


async def _unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="telestore API",
        description="REST API for a file store kept in a Telegram channel",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add API key authentication middleware
    app.middleware("http")(api_key_middleware)

    # Map store errors to HTTP statuses
    app.add_exception_handler(InvalidPathError, _bad_request_handler)
    app.add_exception_handler(ObjectNotFoundError, _not_found_handler)
    app.add_exception_handler(RemoteTransferError, _remote_error_handler)
    app.add_exception_handler(IndexPersistError, _remote_error_handler)
    app.add_exception_handler(InitializationError, _unavailable_handler)

    # Include routers
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])
    app.include_router(files.router, prefix="/api/v1", tags=["Files"])

    return app


# Create the default app instance
app = create_app()


def run_server():
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "telestore.api.app:app",
        host=TELESTORE_HOST,
        port=TELESTORE_PORT,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
