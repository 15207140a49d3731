"""Event and health endpoints."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.responses import ApiResponse
from storage.event_cache import EventCache

logger = logging.getLogger(__name__)

SERVICE_NAME = "SRRC Calendar API"

router = APIRouter(prefix="/api/v1")


def get_event_cache(request: Request) -> EventCache:
    """Return the cache owned by the running application."""
    return request.app.state.event_cache


@router.get("/events", response_model=ApiResponse)
def list_events(cache: EventCache = Depends(get_event_cache)):
    """Return all cached events."""
    logger.info("GET /api/v1/events - Fetching all events")
    events = cache.get_all()
    return ApiResponse.ok(
        data=[event.to_dict() for event in events],
        message=f"Successfully retrieved {len(events)} events",
    )


@router.get("/events/upcoming", response_model=ApiResponse)
def list_upcoming_events(cache: EventCache = Depends(get_event_cache)):
    """Return cached events that have not started yet."""
    logger.info("GET /api/v1/events/upcoming - Fetching upcoming events")
    events = cache.get_upcoming()
    return ApiResponse.ok(
        data=[event.to_dict() for event in events],
        message=f"Successfully retrieved {len(events)} upcoming events",
    )


@router.get("/health", response_model=ApiResponse)
def health_check(cache: EventCache = Depends(get_event_cache)):
    """
    Health check endpoint for monitoring.

    Returns 200 with cache metadata, 503 if the cache cannot be inspected.
    """
    logger.debug("GET /api/v1/health - Health check")
    try:
        cache_info = cache.get_cache_info()
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=503,
            content=ApiResponse.failure(f"Service unhealthy: {e}").model_dump(),
        )

    return ApiResponse.ok(
        data={
            "status": "UP",
            "service": SERVICE_NAME,
            "cache": cache_info,
        },
        message="Service is healthy",
    )


@router.post("/events/refresh", response_model=ApiResponse)
def refresh_events(cache: EventCache = Depends(get_event_cache)):
    """
    Reload events from upstream before answering.

    A failed reload keeps the previous events and still answers 200.
    """
    logger.info("POST /api/v1/events/refresh - Manual refresh triggered")
    cache.force_refresh()
    return ApiResponse.ok(
        data="Refresh initiated",
        message="Events refresh completed successfully",
    )
