"""Liveness and configuration probe."""

from datetime import datetime, timezone

from fastapi import APIRouter

from api.models.responses import HealthResponse
from core.config import API_VERSION, MAX_EVENTS_PER_REQUEST, MAX_OCCURRENCES, REFERENCE_TIMEZONE

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Report the version and the limits requests are held to.

    The engine holds no state, so there is nothing that can make it unhealthy.
    """
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        reference_timezone=REFERENCE_TIMEZONE,
        max_events_per_request=MAX_EVENTS_PER_REQUEST,
        max_occurrences=MAX_OCCURRENCES,
    )
