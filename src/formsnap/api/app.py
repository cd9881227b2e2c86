"""
FastAPI Application Factory & Configuration.

This module initializes the HTTP surface over the snapshot engine. It is
responsible for:
1.  **Middleware Setup**: CORS for browser-based viewers/exporters.
2.  **Exception Handling**: Global handlers so all errors return structured JSON.
3.  **Routing**: Mounting the snapshot router and the health probe.
4.  **Wiring**: Holding the storage provider and change notifier on `app.state`.

Design Pattern
--------------
We use an **Application Factory** pattern (`create_app`). This allows for:
-   Easy testing (a fresh app with in-memory storage per test).
-   Configuration injection (file-backed storage in the server entry point).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from formsnap import __version__
from formsnap.api.routers import snapshots
from formsnap.core.errors import FormSnapError
from formsnap.core.settings import get_logger, load_settings
from formsnap.core.store import ChangeNotifier, KeyValueStorage, MemoryStorage

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    ASGI Lifespan context manager.

    - **Startup**: log which storage provider backs the API.
    - **Shutdown**: nothing to release; storage providers hold no handles.
    """
    logger.info("Starting up with %s", type(app.state.storage).__name__)
    yield
    logger.info("Shutting down")


def create_app(storage: KeyValueStorage | None = None) -> FastAPI:
    """
    Construct and configure the formsnap FastAPI application.

    Parameters
    ----------
    storage:
        Key-value provider shared by all requests. Defaults to a fresh
        `MemoryStorage` (state is lost on restart).
    """
    app = FastAPI(
        title="formsnap API",
        description="Versioned form snapshots: history, diffs and reports",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.storage = storage if storage is not None else MemoryStorage()
    app.state.notifier = ChangeNotifier()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # restrict to the viewer's origin in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={"error": "Bad Request", "detail": str(exc)},
        )

    @app.exception_handler(FormSnapError)
    async def formsnap_error_handler(request: Request, exc: FormSnapError) -> JSONResponse:
        """Engine errors (e.g. a failed migration) are conflicts with stored data."""
        logger.warning("Request to %s failed: %s", request.url.path, exc)
        return JSONResponse(
            status_code=409,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    app.include_router(snapshots.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app"]
