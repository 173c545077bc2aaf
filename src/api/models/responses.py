"""Pydantic response models for API endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC
    reference_timezone: str
    max_events_per_request: int
    max_occurrences: int  # Per event and request


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class OccurrencesResponse(BaseModel):
    occurrences: list[dict]
    count: int


class FreeSlotsResponse(BaseModel):
    policy: str  # "slot-scan"
    slots: list[dict]
    count: int


class DailyAvailabilityResponse(BaseModel):
    policy: str  # "daily-aggregate"
    days: list[dict]


class ConflictsResponse(BaseModel):
    conflicts: list[dict]
    count: int


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_PATTERN = "INVALID_PATTERN"
    INVALID_WINDOW = "INVALID_WINDOW"
    INVALID_TEMPLATE = "INVALID_TEMPLATE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TOO_MANY_EVENTS = "TOO_MANY_EVENTS"
    INTERNAL_ERROR = "INTERNAL_ERROR"
