"""
Conflict detection for a new or edited event.
"""

from typing import Iterable

from core.intervals import Interval
from models.events import BusyPolicy, EventTemplate, Occurrence
from services.recurrence import expand, occurrence_interval


def find_conflicts(
    candidate: Interval,
    candidate_participants: Iterable[str],
    existing_templates: Iterable[EventTemplate],
    *,
    caller_id: str,
    exclude_template_id: str | None = None,
) -> list[Occurrence]:
    """
    Existing occurrences that overlap ``candidate`` and involve someone we care about.

    Owner, attendees and viewers of an existing event all count as busy here
    (visibility is enough). An occurrence is relevant when that busy set
    intersects the caller plus the candidate's participants.

    Returns:
        Conflicting occurrences ordered by start, exact duplicates removed
    """
    relevant = frozenset(candidate_participants) | {caller_id}
    conflicts: list[Occurrence] = []

    for template in existing_templates:
        if exclude_template_id is not None and template.id == exclude_template_id:
            continue
        for occurrence in expand(template, candidate.start, candidate.end):
            if not candidate.overlaps(occurrence.interval):
                continue
            if occurrence.busy_ids(BusyPolicy.ATTENDEES_AND_VIEWERS) & relevant:
                conflicts.append(occurrence)

    ordered = sorted(conflicts, key=lambda o: (o.start, o.end, o.template_id))
    return list(dict.fromkeys(ordered))


def find_conflicts_for_template(
    candidate: EventTemplate,
    existing_templates: Iterable[EventTemplate],
) -> list[Occurrence]:
    """
    Conflicts for an event being created or edited.

    Uses the candidate's first occurrence (day-aligned when all-day), its owner
    as the caller and its attendees as the participants to protect. The
    candidate's own id is excluded so an edit never conflicts with itself.
    """
    first = occurrence_interval(candidate, candidate.start)
    return find_conflicts(
        first,
        candidate.attendee_ids,
        existing_templates,
        caller_id=candidate.owner_id,
        exclude_template_id=candidate.id,
    )
