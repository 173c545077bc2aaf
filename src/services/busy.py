"""
Busy-interval extraction per participant.
"""

from collections import defaultdict
from datetime import datetime
from typing import Iterable

from core.intervals import Interval
from models.events import BusyPolicy, EventTemplate
from services.recurrence import expand


def extract_busy(
    templates: Iterable[EventTemplate],
    query_start: datetime,
    query_end: datetime,
    policy: BusyPolicy = BusyPolicy.ATTENDEES,
) -> dict[str, list[Interval]]:
    """
    Map each participant to the intervals in which they are busy.

    The owner and attendees of every occurrence are always attributed. Viewers
    only count when ``policy`` is ``ATTENDEES_AND_VIEWERS``.

    Returns:
        participant id -> intervals sorted by start (not merged)
    """
    busy: dict[str, list[Interval]] = defaultdict(list)
    for template in templates:
        for occurrence in expand(template, query_start, query_end):
            for participant_id in occurrence.busy_ids(policy):
                busy[participant_id].append(occurrence.interval)
    return {participant_id: sorted(intervals) for participant_id, intervals in busy.items()}


def extract_visibility(
    templates: Iterable[EventTemplate],
    query_start: datetime,
    query_end: datetime,
) -> dict[str, list[Interval]]:
    """
    Map viewer-only participants to the occurrences they can see.

    A viewer who is also the owner or an attendee is already busy and is not
    repeated here.
    """
    visible: dict[str, list[Interval]] = defaultdict(list)
    for template in templates:
        viewers_only = template.viewer_ids - template.participant_ids
        if not viewers_only:
            continue
        for occurrence in expand(template, query_start, query_end):
            for participant_id in viewers_only:
                visible[participant_id].append(occurrence.interval)
    return {participant_id: sorted(intervals) for participant_id, intervals in visible.items()}
