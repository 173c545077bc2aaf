"""
Shared free-time calculation for a set of participants.

A participant set is jointly free in a sub-interval only when every member
(caller included) is free, so the busy intervals of all members are merged
into one list and each sub-interval is checked against it.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable
from zoneinfo import ZoneInfo

from core.config import (
    DEFAULT_RANGE_DAYS,
    DEFAULT_SLOT_MINUTES,
    HIGH_AVAILABILITY_HOURS,
    MAX_FREE_SLOTS,
    MAX_RANGE_DAYS,
    MAX_WINDOW_MINUTES,
    WAKING_HOURS_END,
    WAKING_HOURS_START,
)
from core.errors import InvalidWindow
from core.intervals import Interval, merge, merge_all, overlaps_any
from core.logging_config import get_logger
from core.validation import validate_timezone
from models.events import (
    AvailabilityLevel,
    BusyPolicy,
    DayAvailability,
    EventTemplate,
    FreeSlot,
)
from services.busy import extract_busy

UTC = timezone.utc

logger = get_logger(__name__)


@dataclass(frozen=True)
class TimeOfDayWindow:
    """Minutes from local midnight; ``end_minute`` may reach into the next day."""

    start_minute: int
    end_minute: int

    def __post_init__(self):
        if not 0 <= self.start_minute < self.end_minute <= MAX_WINDOW_MINUTES:
            raise InvalidWindow(
                "Time-of-day window must satisfy 0 <= start < end <= "
                f"{MAX_WINDOW_MINUTES} minutes",
                [f"start={self.start_minute}", f"end={self.end_minute}"],
            )

    def on(self, day: date, zone: ZoneInfo) -> Interval:
        """The window on a given local day, as a UTC interval."""
        midnight = datetime.combine(day, time(0), tzinfo=zone)
        return Interval(
            (midnight + timedelta(minutes=self.start_minute)).astimezone(UTC),
            (midnight + timedelta(minutes=self.end_minute)).astimezone(UTC),
        )


WAKING_HOURS = TimeOfDayWindow(WAKING_HOURS_START * 60, WAKING_HOURS_END * 60)


def find_free_slots(
    templates: Iterable[EventTemplate],
    caller_id: str,
    participant_ids: Iterable[str],
    start_day: date,
    days: int,
    window: TimeOfDayWindow,
    *,
    timezone_name: str = "UTC",
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
    policy: BusyPolicy = BusyPolicy.ATTENDEES,
    max_slots: int = MAX_FREE_SLOTS,
) -> list[FreeSlot]:
    """
    Slot-scan policy: free slots inside a time-of-day window over a day range.

    Each day's window is cut into ``slot_minutes`` sub-intervals (the last one
    clipped to the window end); free sub-intervals are merged into FreeSlots.
    Slots never merge across days unless the windows of consecutive days
    overlap, in which case the overlapping windows are scanned as one.

    Returns:
        At most ``max_slots`` FreeSlots ordered by start
    """
    zone = validate_timezone(timezone_name)
    participants = frozenset(participant_ids) | {caller_id}
    day_windows = _day_windows(start_day, days, window, zone)
    busy = _merged_busy(templates, participants, day_windows, policy)
    slot = _slot_length(slot_minutes)

    slots: list[FreeSlot] = []
    for scan_window in _coalesce(day_windows):
        slots.extend(_scan(scan_window, busy, slot, participants))
        if len(slots) >= max_slots:
            logger.warning(
                "Free slot cap reached, stopping scan",
                cap=max_slots,
                stopped_at=scan_window.end.isoformat(),
            )
            return slots[:max_slots]
    return slots


def daily_availability(
    templates: Iterable[EventTemplate],
    caller_id: str,
    participant_ids: Iterable[str],
    start_day: date,
    days: int = DEFAULT_RANGE_DAYS,
    *,
    timezone_name: str = "UTC",
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
    policy: BusyPolicy = BusyPolicy.ATTENDEES,
) -> list[DayAvailability]:
    """
    Daily-aggregate policy: shared free time during waking hours, per day.

    Each day reports its merged free slots, total free minutes and a heat-map
    level (``high`` from 8 free hours, ``none`` when nothing is free).
    """
    zone = validate_timezone(timezone_name)
    participants = frozenset(participant_ids) | {caller_id}
    day_windows = _day_windows(start_day, days, WAKING_HOURS, zone)
    busy = _merged_busy(templates, participants, day_windows, policy)
    slot = _slot_length(slot_minutes)

    result = []
    for offset, day_window in enumerate(day_windows):
        slots = _scan(day_window, busy, slot, participants)
        free_minutes = sum(s.duration_minutes for s in slots)
        result.append(
            DayAvailability(
                day=start_day + timedelta(days=offset),
                slots=tuple(slots),
                free_minutes=free_minutes,
                level=_level(free_minutes),
            )
        )
    return result


def _day_windows(start_day: date, days: int, window: TimeOfDayWindow, zone: ZoneInfo) -> list[Interval]:
    if not 0 < days <= MAX_RANGE_DAYS:
        raise InvalidWindow(f"Day range must be between 1 and {MAX_RANGE_DAYS}, got {days}", ["days"])
    return [window.on(start_day + timedelta(days=i), zone) for i in range(days)]


def _coalesce(day_windows: list[Interval]) -> list[Interval]:
    """Join day windows that overlap (windows longer than 24h); touching ones stay apart."""
    windows: list[Interval] = []
    for window in day_windows:
        if windows and window.start < windows[-1].end:
            windows[-1] = merge(windows[-1], window)
        else:
            windows.append(window)
    return windows


def _slot_length(slot_minutes: int) -> timedelta:
    if slot_minutes <= 0:
        raise InvalidWindow(f"Slot size must be positive, got {slot_minutes}", ["slotMinutes"])
    return timedelta(minutes=slot_minutes)


def _merged_busy(
    templates: Iterable[EventTemplate],
    participants: frozenset[str],
    day_windows: list[Interval],
    policy: BusyPolicy,
) -> list[Interval]:
    query_start = min(w.start for w in day_windows)
    query_end = max(w.end for w in day_windows)
    busy = extract_busy(templates, query_start, query_end, policy)
    return merge_all(
        interval
        for participant_id in participants
        for interval in busy.get(participant_id, [])
    )


def _scan(window: Interval, busy: list[Interval], slot: timedelta, participants: frozenset[str]) -> list[FreeSlot]:
    """Walk the window slot by slot, merging runs of free slots."""
    slots = []
    run_start = None
    cursor = window.start
    while cursor < window.end:
        slot_end = min(cursor + slot, window.end)
        if overlaps_any(Interval(cursor, slot_end), busy):
            if run_start is not None:
                slots.append(FreeSlot(interval=Interval(run_start, cursor), qualifying_participants=participants))
                run_start = None
        elif run_start is None:
            run_start = cursor
        cursor = slot_end

    if run_start is not None:
        slots.append(FreeSlot(interval=Interval(run_start, window.end), qualifying_participants=participants))
    return slots


def _level(free_minutes: int) -> AvailabilityLevel:
    if free_minutes == 0:
        return AvailabilityLevel.NONE
    if free_minutes >= HIGH_AVAILABILITY_HOURS * 60:
        return AvailabilityLevel.HIGH
    return AvailabilityLevel.PARTIAL
