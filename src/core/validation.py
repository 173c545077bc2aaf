"""
Boundary validation for query windows, recurrence fields and template sets.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.errors import InvalidPattern, InvalidTemplate, InvalidWindow
from core.intervals import Interval


def validate_window(start: datetime, end: datetime) -> Interval:
    """
    Validate a query window and return it as an Interval.

    Raises:
        InvalidWindow: if either bound is naive or ``start >= end``
    """
    if start.tzinfo is None or end.tzinfo is None:
        raise InvalidWindow(
            "Query window bounds must carry a timezone",
            [f"from={start.isoformat()}", f"to={end.isoformat()}"],
        )
    if start >= end:
        raise InvalidWindow(
            "Query window 'from' must be before 'to'",
            [f"from={start.isoformat()}", f"to={end.isoformat()}"],
        )
    return Interval(start, end)


def validate_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA zone name, rejecting unknown zones."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTemplate(f"Unknown timezone '{name}'", [str(e)]) from e


def validate_interval(interval: int) -> int:
    """Repeat step must be a positive integer; zero and negatives are never coerced."""
    if interval <= 0:
        raise InvalidPattern(
            f"Recurrence interval must be positive, got {interval}",
            ["interval"],
        )
    return interval


def validate_days_of_week(days: Iterable[int]) -> frozenset[int]:
    """Weekday indices run 0=Sunday..6=Saturday."""
    days = frozenset(days)
    invalid = sorted(d for d in days if not 0 <= d <= 6)
    if invalid:
        raise InvalidPattern(
            "Weekday indices must be between 0 (Sunday) and 6 (Saturday)",
            [f"Invalid weekday: {d}" for d in invalid],
        )
    return days


def validate_aware(value: datetime, field_name: str, error_cls=InvalidTemplate) -> datetime:
    """Instants must be timezone-qualified."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise error_cls(
            f"'{field_name}' must be a timezone-aware instant",
            [f"{field_name}={value.isoformat()}"],
        )
    return value


def validate_templates(templates: list) -> list:
    """
    Check a template collection for duplicate ids.

    Conflict detection excludes the template being edited by id, so ids must
    be unique within one call.
    """
    counts = Counter(t.id for t in templates)
    duplicates = sorted(template_id for template_id, n in counts.items() if n > 1)
    if duplicates:
        raise InvalidTemplate(
            "Event ids must be unique",
            [f"Duplicate id: {template_id}" for template_id in duplicates],
        )
    return templates
