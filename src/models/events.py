"""
Data models for event templates, recurrence patterns and engine results.

Input models accept both the camelCase wire names (``ownerId``, ``isAllDay``,
``daysOfWeek``) and the snake_case attribute names. All models are frozen:
the engine borrows templates for one call and never mutates them.
"""

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from zoneinfo import ZoneInfo

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from core.errors import InvalidPattern, InvalidTemplate
from core.intervals import Interval
from core.validation import (
    validate_aware,
    validate_days_of_week,
    validate_interval,
    validate_timezone,
)

UTC = timezone.utc
FREQUENCIES = ("daily", "weekly", "monthly", "custom")


class EngineModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class BusyPolicy(str, Enum):
    """Which participant roles block time."""

    ATTENDEES = "attendees"  # owner + attendees
    ATTENDEES_AND_VIEWERS = "attendees-and-viewers"  # visibility is enough


class AvailabilityLevel(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    HIGH = "high"


# =============================================================================
# RECURRENCE PATTERNS
# =============================================================================


class _Pattern(EngineModel):
    interval: int = 1
    end_date: datetime | None = None

    @field_validator("interval", mode="before")
    @classmethod
    def _default_interval(cls, v):
        return 1 if v is None else v

    @field_validator("interval")
    @classmethod
    def _check_interval(cls, v: int) -> int:
        return validate_interval(v)

    @field_validator("end_date")
    @classmethod
    def _check_end_date(cls, v: datetime | None) -> datetime | None:
        if v is not None:
            validate_aware(v, "endDate", InvalidPattern)
        return v


class DailyPattern(_Pattern):
    frequency: Literal["daily"] = "daily"


class WeeklyPattern(_Pattern):
    """Weekly repeat. An empty ``days_of_week`` inherits the start weekday."""

    frequency: Literal["weekly"] = "weekly"
    days_of_week: frozenset[int] = frozenset()

    @field_validator("days_of_week", mode="before")
    @classmethod
    def _default_days(cls, v):
        return [] if v is None else v

    @field_validator("days_of_week")
    @classmethod
    def _check_days(cls, v: frozenset[int]) -> frozenset[int]:
        return validate_days_of_week(v)


class MonthlyPattern(_Pattern):
    frequency: Literal["monthly"] = "monthly"


class CustomPattern(_Pattern):
    """Expanded as every ``interval`` days; see ``AmbiguousRecurrence``."""

    frequency: Literal["custom"] = "custom"


RecurrencePattern = Annotated[
    Union[DailyPattern, WeeklyPattern, MonthlyPattern, CustomPattern],
    Field(discriminator="frequency"),
]


# =============================================================================
# EVENT TEMPLATE
# =============================================================================


class EventTemplate(EngineModel):
    """Durable definition of a (possibly recurring) event."""

    id: str
    owner_id: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    timezone: str = "UTC"
    recurrence: Optional[RecurrencePattern] = None
    attendee_ids: frozenset[str] = frozenset()
    viewer_ids: frozenset[str] = frozenset()
    exceptions: frozenset[datetime] = frozenset()

    @field_validator("recurrence", mode="before")
    @classmethod
    def _check_frequency_tag(cls, v):
        if isinstance(v, dict):
            tag = v.get("frequency")
            if tag == "none":
                return None
            if tag not in FREQUENCIES:
                raise InvalidPattern(
                    f"Unknown recurrence frequency {tag!r}",
                    [f"Expected one of: {', '.join(FREQUENCIES)}"],
                )
        return v

    @field_validator("attendee_ids", "viewer_ids", "exceptions", mode="before")
    @classmethod
    def _default_empty(cls, v):
        return [] if v is None else v

    @field_validator("start", "end")
    @classmethod
    def _check_aware(cls, v: datetime, info: ValidationInfo) -> datetime:
        return validate_aware(v, info.field_name)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        validate_timezone(v)
        return v

    @field_validator("exceptions")
    @classmethod
    def _normalize_exceptions(cls, v: frozenset[datetime]) -> frozenset[datetime]:
        return frozenset(validate_aware(e, "exceptions").astimezone(UTC) for e in v)

    @model_validator(mode="after")
    def _check_bounds(self):
        inverted = self.end < self.start if self.is_all_day else self.end <= self.start
        if inverted:
            raise InvalidTemplate(
                f"Event '{self.id}' ends before it starts",
                [f"start={self.start.isoformat()}", f"end={self.end.isoformat()}"],
            )
        return self

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def participant_ids(self) -> frozenset[str]:
        """Owner plus attendees; the owner is always a participant."""
        return self.attendee_ids | {self.owner_id}

    @property
    def span_days(self) -> int:
        """Number of calendar days an all-day occurrence covers (at least one)."""
        zone = self.zone
        start_day = self.start.astimezone(zone).date()
        local_end = self.end.astimezone(zone)
        end_day = local_end.date()
        # An end inside a day (or on the start day itself) still covers that day
        if local_end.time() != time(0) or end_day == start_day:
            end_day += timedelta(days=1)
        return max((end_day - start_day).days, 1)


# =============================================================================
# RESULTS
# =============================================================================


class Occurrence(EngineModel):
    """One concrete materialisation of a template."""

    template_id: str
    interval: Interval
    participant_ids: frozenset[str]
    viewer_ids: frozenset[str] = frozenset()

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    def busy_ids(self, policy: BusyPolicy = BusyPolicy.ATTENDEES) -> frozenset[str]:
        if policy == BusyPolicy.ATTENDEES_AND_VIEWERS:
            return self.participant_ids | self.viewer_ids
        return self.participant_ids

    @field_serializer("participant_ids", "viewer_ids")
    def _sorted_ids(self, ids: frozenset[str]) -> list[str]:
        return sorted(ids)


class FreeSlot(EngineModel):
    interval: Interval
    qualifying_participants: frozenset[str]

    @property
    def duration_minutes(self) -> int:
        return int(self.interval.duration.total_seconds() // 60)

    @field_serializer("qualifying_participants")
    def _sorted_ids(self, ids: frozenset[str]) -> list[str]:
        return sorted(ids)


class DayAvailability(EngineModel):
    """Shared free time for one calendar day, ranked for a heat map."""

    day: date
    slots: tuple[FreeSlot, ...] = ()
    free_minutes: int = 0
    level: AvailabilityLevel = AvailabilityLevel.NONE
