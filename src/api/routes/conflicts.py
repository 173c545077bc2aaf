"""Conflict detection endpoint."""

import asyncio

from fastapi import APIRouter, Request

from api.dependencies import get_client_ip, logged_request, parse_templates
from api.logging import RequestLog
from api.models import ConflictsRequest, ConflictsResponse
from models.events import EventTemplate
from services.conflicts import find_conflicts, find_conflicts_for_template
from services.recurrence import occurrence_interval

router = APIRouter(prefix="/v1")


@router.post("/conflicts", response_model=ConflictsResponse)
async def detect_conflicts(request: Request, body: ConflictsRequest):
    """
    Report existing occurrences that clash with a new or edited event.

    The candidate's owner is the caller. When ``participantIds`` is omitted,
    the candidate's attendees are the participants to protect.
    """
    request_log = RequestLog(
        endpoint="/v1/conflicts",
        method="POST",
        client_ip=get_client_ip(request),
        events_received=len(body.events),
    )

    with logged_request(request_log):
        templates = parse_templates(body.events)
        candidate = EventTemplate.model_validate(body.candidate)

        if body.participant_ids is None:
            conflicts = await asyncio.to_thread(find_conflicts_for_template, candidate, templates)
        else:
            conflicts = await asyncio.to_thread(
                find_conflicts,
                occurrence_interval(candidate, candidate.start),
                body.participant_ids,
                templates,
                caller_id=candidate.owner_id,
                exclude_template_id=candidate.id,
            )

        request_log.participants = len(candidate.participant_ids)
        request_log.results_returned = len(conflicts)
        request_log.finish(200)

        return ConflictsResponse(
            conflicts=[c.model_dump(mode="json", by_alias=True) for c in conflicts],
            count=len(conflicts),
        )
