"""Shared availability endpoint."""

import asyncio

from fastapi import APIRouter, Request

from api.dependencies import get_client_ip, logged_request, parse_templates
from api.logging import RequestLog
from api.models import AvailabilityRequest, DailyAvailabilityResponse, FreeSlotsResponse
from services.availability import TimeOfDayWindow, daily_availability, find_free_slots

router = APIRouter(prefix="/v1")


@router.post(
    "/availability",
    response_model=FreeSlotsResponse | DailyAvailabilityResponse,
)
async def find_availability(request: Request, body: AvailabilityRequest):
    """
    Compute time when the caller and every selected participant are free.

    ``slot-scan`` lists free slots inside a time-of-day window for each day;
    ``daily-aggregate`` reports waking-hours free time per day for a heat map.
    """
    request_log = RequestLog(
        endpoint="/v1/availability",
        method="POST",
        client_ip=get_client_ip(request),
        events_received=len(body.events),
        participants=len(set(body.participant_ids) | {body.caller_id}),
    )

    with logged_request(request_log):
        templates = parse_templates(body.events)

        if body.policy == "slot-scan":
            window = TimeOfDayWindow(body.window_start_minutes, body.window_end_minutes)
            slots = await asyncio.to_thread(
                find_free_slots,
                templates,
                body.caller_id,
                body.participant_ids,
                body.start_date,
                body.days,
                window,
                timezone_name=body.timezone,
                slot_minutes=body.slot_minutes,
                policy=body.busy_policy,
            )
            request_log.results_returned = len(slots)
            request_log.finish(200)
            return FreeSlotsResponse(
                policy=body.policy,
                slots=[s.model_dump(mode="json", by_alias=True) for s in slots],
                count=len(slots),
            )

        days = await asyncio.to_thread(
            daily_availability,
            templates,
            body.caller_id,
            body.participant_ids,
            body.start_date,
            body.days,
            timezone_name=body.timezone,
            slot_minutes=body.slot_minutes,
            policy=body.busy_policy,
        )
        request_log.results_returned = len(days)
        request_log.finish(200)
        return DailyAvailabilityResponse(
            policy=body.policy,
            days=[d.model_dump(mode="json", by_alias=True) for d in days],
        )
