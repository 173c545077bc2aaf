"""API Pydantic models."""

from .requests import AvailabilityRequest, ConflictsRequest, OccurrencesRequest, QueryWindow
from .responses import (
    ConflictsResponse,
    DailyAvailabilityResponse,
    ErrorCodes,
    ErrorResponse,
    FreeSlotsResponse,
    HealthResponse,
    OccurrencesResponse,
)

__all__ = [
    "AvailabilityRequest",
    "ConflictsRequest",
    "ConflictsResponse",
    "DailyAvailabilityResponse",
    "ErrorCodes",
    "ErrorResponse",
    "FreeSlotsResponse",
    "HealthResponse",
    "OccurrencesRequest",
    "OccurrencesResponse",
    "QueryWindow",
]
