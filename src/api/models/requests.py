"""Pydantic request models for API endpoints.

Event records are kept as raw dicts here and parsed inside the route, so
pattern and template errors are reported (and logged) with their own codes.
"""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import DEFAULT_RANGE_DAYS, DEFAULT_SLOT_MINUTES, MAX_RANGE_DAYS, REFERENCE_TIMEZONE
from models.events import BusyPolicy


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryWindow(RequestModel):
    start: datetime = Field(alias="from")
    end: datetime = Field(alias="to")


class OccurrencesRequest(RequestModel):
    events: list[dict[str, Any]]
    window: QueryWindow


class AvailabilityRequest(RequestModel):
    events: list[dict[str, Any]]
    caller_id: str
    participant_ids: list[str] = []
    policy: Literal["slot-scan", "daily-aggregate"] = "daily-aggregate"
    busy_policy: BusyPolicy = BusyPolicy.ATTENDEES
    timezone: str = REFERENCE_TIMEZONE
    start_date: date
    days: int = Field(DEFAULT_RANGE_DAYS, le=MAX_RANGE_DAYS)
    slot_minutes: int = DEFAULT_SLOT_MINUTES
    # Slot-scan only; minutes from local midnight, up to 2880
    window_start_minutes: int = 0
    window_end_minutes: int = 1440


class ConflictsRequest(RequestModel):
    events: list[dict[str, Any]]
    candidate: dict[str, Any]
    # Overrides the candidate's attendees when given
    participant_ids: list[str] | None = None
