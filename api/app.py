"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.responses import ApiResponse
from api.routes import router
from scheduler.refresh_scheduler import RefreshScheduler
from storage.event_cache import EventCache

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(
    cache: EventCache,
    scheduler: Optional[RefreshScheduler] = None,
    cors_origins: Optional[List[str]] = None,
) -> FastAPI:
    """
    Build the API around an already constructed cache.

    The lifespan loads the cache once, then starts the scheduler; shutdown
    stops the scheduler.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: blocking initial load so the first request sees data
        app.state.event_cache.initialize()
        if scheduler is not None:
            scheduler.start()

        yield

        # Shutdown
        if scheduler is not None:
            scheduler.stop()

    app = FastAPI(
        title="SRRC Calendar API",
        description="REST API serving SRRC events published as a GitHub release asset",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.event_cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Map invalid argument/state conditions to 400."""
        logger.error(f"Invalid request: {exc}")
        return JSONResponse(
            status_code=400,
            content=ApiResponse.failure(str(exc) or "Invalid argument").model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with the standard envelope."""
        logger.error(f"Unhandled exception: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=ApiResponse.failure(
                f"An unexpected error occurred: {exc}"
            ).model_dump(),
        )

    app.include_router(router)

    return app
