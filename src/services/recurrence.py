"""
Recurrence expansion: event templates to concrete occurrences.

Stepping happens on the wall clock of the template's reference timezone, so a
series at 10:00 stays at 10:00 across daylight-saving changes. All returned
intervals are in UTC.
"""

import warnings
from datetime import datetime, time, timedelta, timezone
from typing import Iterable

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, MO, MONTHLY, WEEKLY, rrule, rruleset

from core.config import MAX_OCCURRENCES
from core.errors import AmbiguousRecurrence
from core.intervals import Interval
from core.logging_config import get_logger
from core.validation import validate_window
from models.events import (
    CustomPattern,
    DailyPattern,
    EventTemplate,
    MonthlyPattern,
    Occurrence,
    WeeklyPattern,
)

UTC = timezone.utc

logger = get_logger(__name__)


def expand(
    template: EventTemplate,
    query_start: datetime,
    query_end: datetime,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Occurrence]:
    """
    Expand a template into occurrences overlapping ``[query_start, query_end)``.

    Args:
        template: Event definition; never mutated
        query_start: Inclusive window start (timezone-aware)
        query_end: Exclusive window end (timezone-aware)
        max_occurrences: Safety cap; once reached the ordered partial result is returned

    Returns:
        Occurrences ordered by start ascending

    Raises:
        InvalidWindow: if the window is empty, inverted or naive
    """
    window = validate_window(query_start, query_end)
    pattern = template.recurrence

    if isinstance(pattern, CustomPattern):
        warnings.warn(
            f"Event '{template.id}': 'custom' recurrence expanded as every "
            f"{pattern.interval} day(s)",
            AmbiguousRecurrence,
            stacklevel=2,
        )

    # Occurrences starting before this cannot reach into the window
    horizon = window.start - _max_span(template)

    occurrences: list[Occurrence] = []
    for nominal in build_rule(template, horizon):
        interval = occurrence_interval(template, nominal)
        if interval.start >= window.end:
            break
        if interval.end <= window.start:
            continue
        if template.is_all_day and interval.start in template.exceptions:
            continue
        if len(occurrences) >= max_occurrences:
            logger.warning(
                "Occurrence cap reached, truncating expansion",
                template_id=template.id,
                cap=max_occurrences,
                window_start=window.start.isoformat(),
                window_end=window.end.isoformat(),
            )
            break
        occurrences.append(
            Occurrence(
                template_id=template.id,
                interval=interval,
                participant_ids=template.participant_ids,
                viewer_ids=template.viewer_ids,
            )
        )

    return occurrences


def expand_all(
    templates: Iterable[EventTemplate],
    query_start: datetime,
    query_end: datetime,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Occurrence]:
    """Expand many templates; results ordered by start, end, then template id."""
    validate_window(query_start, query_end)
    occurrences = []
    for template in templates:
        occurrences.extend(expand(template, query_start, query_end, max_occurrences))
    return sorted(occurrences, key=lambda o: (o.start, o.end, o.template_id))


def occurrence_interval(template: EventTemplate, nominal: datetime) -> Interval:
    """
    Interval of the occurrence whose nominal (template-time) start is ``nominal``.

    Timed events keep the template's exact duration. All-day events cover whole
    calendar days from local midnight to local midnight, which may be 23 or 25
    hours long around daylight-saving changes.
    """
    if template.is_all_day:
        zone = template.zone
        day = nominal.astimezone(zone).date()
        start = datetime.combine(day, time(0), tzinfo=zone)
        end = datetime.combine(day + timedelta(days=template.span_days), time(0), tzinfo=zone)
        return Interval(start.astimezone(UTC), end.astimezone(UTC))

    start = nominal.astimezone(UTC)
    return Interval(start, start + template.duration)


def _max_span(template: EventTemplate) -> timedelta:
    if template.is_all_day:
        # Local midnight can sit up to a day away from the nominal instant
        return timedelta(days=template.span_days + 1)
    return template.duration


def build_rule(template: EventTemplate, horizon: datetime) -> rruleset:
    """
    Recurrence rule of a template as a dateutil ``rruleset``.

    Rules run on the local wall clock of the template's zone, so iteration
    yields local-zone datetimes in ascending order. Exceptions become exdates.
    Whole periods ending before ``horizon`` are skipped by moving ``dtstart``
    forward to the start of a later period; recurring sets are otherwise
    unbounded and the caller stops iteration.
    """
    local_start = template.start.astimezone(template.zone)
    pattern = template.recurrence

    rules = rruleset()
    if pattern is None:
        rules.rdate(local_start)
    else:
        rules.rrule(_pattern_rule(pattern, local_start, horizon.astimezone(template.zone)))

    for exception in template.exceptions:
        rules.exdate(exception)
    return rules


def _pattern_rule(pattern, local_start: datetime, horizon_local: datetime) -> rrule:
    common = {"interval": pattern.interval, "until": pattern.end_date, "wkst": MO}

    if isinstance(pattern, (DailyPattern, CustomPattern)):
        k = _skip_periods((horizon_local.date() - local_start.date()).days, pattern.interval)
        dtstart = local_start + timedelta(days=pattern.interval * k)
        return rrule(DAILY, dtstart=dtstart, **common)

    if isinstance(pattern, WeeklyPattern):
        # Weekday indices are 0=Sunday; dateutil counts from Monday
        weekdays = sorted((d - 1) % 7 for d in pattern.days_of_week) or [local_start.weekday()]
        anchor = local_start.date() - timedelta(days=local_start.weekday())
        k = _skip_periods((horizon_local.date() - anchor).days // 7, pattern.interval)
        dtstart = local_start
        if k:
            # Monday of a later bucket, so none of its listed days are lost
            bucket = anchor + timedelta(weeks=pattern.interval * k)
            dtstart = datetime.combine(bucket, local_start.time(), tzinfo=local_start.tzinfo)
        return rrule(WEEKLY, dtstart=dtstart, byweekday=weekdays, **common)

    months = (horizon_local.year - local_start.year) * 12 + (horizon_local.month - local_start.month)
    k = _skip_periods(months, pattern.interval)
    dtstart = local_start
    if k:
        dtstart = local_start.replace(day=1) + relativedelta(months=pattern.interval * k)
    if local_start.day > 28:
        # Fall back to the month's last day when it is shorter
        return rrule(MONTHLY, dtstart=dtstart, bymonthday=(local_start.day, -1), bysetpos=1, **common)
    return rrule(MONTHLY, dtstart=dtstart, bymonthday=local_start.day, **common)


def _skip_periods(units_before_horizon: int, interval: int) -> int:
    """Whole steps that can be skipped, kept one step short of the horizon."""
    return max(units_before_horizon // interval - 1, 0)
