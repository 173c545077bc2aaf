"""Recurrence expansion endpoint."""

import asyncio

from fastapi import APIRouter, Request

from api.dependencies import get_client_ip, logged_request, parse_templates
from api.logging import RequestLog
from api.models import OccurrencesRequest, OccurrencesResponse
from services.recurrence import expand_all

router = APIRouter(prefix="/v1")


@router.post("/occurrences", response_model=OccurrencesResponse)
async def expand_occurrences(request: Request, body: OccurrencesRequest):
    """
    Expand event records into concrete occurrences within a query window.

    Occurrences are ordered by start; each recurring series is capped.
    """
    request_log = RequestLog(
        endpoint="/v1/occurrences",
        method="POST",
        client_ip=get_client_ip(request),
        events_received=len(body.events),
    )

    with logged_request(request_log):
        templates = parse_templates(body.events)
        occurrences = await asyncio.to_thread(
            expand_all, templates, body.window.start, body.window.end
        )

        request_log.results_returned = len(occurrences)
        request_log.finish(200)

        return OccurrencesResponse(
            occurrences=[o.model_dump(mode="json", by_alias=True) for o in occurrences],
            count=len(occurrences),
        )
