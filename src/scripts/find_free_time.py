#!/usr/bin/env python3
"""
Print shared free time for the next days from a JSON export of events.

Reads a JSON file holding a list of event records (or ``{"events": [...]}``),
computes waking-hours availability for the caller plus the selected people,
and prints one line per day followed by its free slots.

Usage:
    uv run python src/scripts/find_free_time.py --events events.json --caller u1 --with u2 --with u3
"""

import argparse
import json
import sys
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DEFAULT_RANGE_DAYS, HIGH_AVAILABILITY_HOURS, REFERENCE_TIMEZONE
from core.errors import EngineError
from core.logging_config import setup_logging
from core.validation import validate_templates, validate_timezone
from models.events import AvailabilityLevel, BusyPolicy, EventTemplate
from services.availability import daily_availability

LEVEL_MARKERS = {
    AvailabilityLevel.HIGH: "###",
    AvailabilityLevel.PARTIAL: "+  ",
    AvailabilityLevel.NONE: "-  ",
}


def load_templates(path: Path) -> list[EventTemplate]:
    """Load and validate event records from a JSON file."""
    with open(path) as f:
        payload = json.load(f)
    records = payload["events"] if isinstance(payload, dict) else payload
    return validate_templates([EventTemplate.model_validate(r) for r in records])


def parse_start_date(date_str: str | None) -> date:
    if date_str:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    return date.today()


def main(
    events_path: Path,
    caller_id: str,
    participant_ids: list[str],
    start_date_str: str | None,
    days: int,
    timezone_name: str,
    include_viewers: bool,
):
    """Main entry point."""
    start_day = parse_start_date(start_date_str)
    zone = validate_timezone(timezone_name)

    templates = load_templates(events_path)
    print(f"Loaded {len(templates)} event(s) from {events_path}")

    everyone = sorted(set(participant_ids) | {caller_id})
    print(f"Shared availability for {', '.join(everyone)} ({timezone_name})")
    print(f"Legend: ### >= {HIGH_AVAILABILITY_HOURS}h free, + some free time, - fully booked\n")

    policy = BusyPolicy.ATTENDEES_AND_VIEWERS if include_viewers else BusyPolicy.ATTENDEES
    availability = daily_availability(
        templates,
        caller_id,
        participant_ids,
        start_day,
        days,
        timezone_name=timezone_name,
        policy=policy,
    )

    for day in availability:
        hours = day.free_minutes / 60
        print(f"{LEVEL_MARKERS[day.level]} {day.day.strftime('%a %b %d')}  {hours:4.1f}h free")
        for slot in day.slots:
            start = slot.interval.start.astimezone(zone).strftime("%H:%M")
            end = slot.interval.end.astimezone(zone).strftime("%H:%M")
            print(f"      {start} - {end}")

    best = max(availability, key=lambda d: d.free_minutes)
    if best.free_minutes:
        print(f"\nMost shared free time: {best.day.isoformat()} ({best.free_minutes / 60:.1f}h)")
    else:
        print("\nNo shared free time found")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Find shared free time from an events file")
    parser.add_argument("--events", required=True, type=Path, help="JSON file with event records")
    parser.add_argument("--caller", required=True, help="Participant id of the person asking")
    parser.add_argument(
        "--with",
        dest="participants",
        action="append",
        default=[],
        help="Participant id to include (repeatable)",
    )
    parser.add_argument("--date", help="First day (YYYY-MM-DD). Defaults to today.")
    parser.add_argument("--days", type=int, default=DEFAULT_RANGE_DAYS, help="Number of days")
    parser.add_argument("--timezone", default=REFERENCE_TIMEZONE, help="IANA timezone name")
    parser.add_argument(
        "--include-viewers",
        action="store_true",
        help="Count events a person can only view as busy",
    )
    args = parser.parse_args()

    setup_logging(log_level="WARNING")
    try:
        main(
            args.events,
            args.caller,
            args.participants,
            args.date,
            args.days,
            args.timezone,
            args.include_viewers,
        )
    except EngineError as e:
        print(f"\nError: {e.message}")
        for detail in e.details:
            print(f"  {detail}")
        sys.exit(1)
