"""
Half-open time interval primitives.
"""

from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from core.errors import InvalidWindow


@dataclass(frozen=True, order=True)
class Interval:
    """A ``[start, end)`` pair of timezone-aware instants."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidWindow(
                "Interval bounds must be timezone-aware",
                [f"start={self.start.isoformat()}", f"end={self.end.isoformat()}"],
            )
        if not self.start < self.end:
            raise InvalidWindow(
                "Interval start must be before end",
                [f"start={self.start.isoformat()}", f"end={self.end.isoformat()}"],
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)


def overlaps(a: Interval, b: Interval) -> bool:
    """True when the intervals share time. Touching endpoints do not overlap."""
    return a.start < b.end and b.start < a.end


def merge(a: Interval, b: Interval) -> Interval:
    """Merge two overlapping or adjacent intervals."""
    if a.end < b.start or b.end < a.start:
        raise ValueError(f"Cannot merge disjoint intervals {a} and {b}")
    return Interval(min(a.start, b.start), max(a.end, b.end))


def merge_all(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Collapse intervals into a sorted, non-overlapping list.

    Adjacent intervals (one ending where the next starts) are joined.
    """
    merged: list[Interval] = []
    for interval in sorted(intervals):
        if merged and interval.start <= merged[-1].end:
            if interval.end > merged[-1].end:
                merged[-1] = Interval(merged[-1].start, interval.end)
        else:
            merged.append(interval)
    return merged


def overlaps_any(interval: Interval, merged: list[Interval]) -> bool:
    """
    Check an interval against a list produced by ``merge_all``.

    Merged intervals are disjoint and sorted, so only the one starting at or
    before ``interval.start`` and its successor can overlap.
    """
    idx = bisect_right(merged, interval.start, key=lambda m: m.start)
    for candidate in merged[max(idx - 1, 0) : idx + 1]:
        if overlaps(interval, candidate):
            return True
    return False
