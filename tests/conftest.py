"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from models.events import EventTemplate  # noqa: E402

UTC = timezone.utc


def utc(*args) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=UTC)


@pytest.fixture
def sample_event():
    """Sample event record in wire format."""
    return {
        "id": "evt-1",
        "ownerId": "u1",
        "start": "2024-01-01T10:00:00Z",  # Monday
        "end": "2024-01-01T11:00:00Z",
        "isAllDay": False,
        "recurrence": {"frequency": "weekly", "interval": 1, "daysOfWeek": [1]},
        "attendeeIds": ["u2"],
        "viewerIds": ["u3"],
    }


@pytest.fixture
def weekly_template(sample_event):
    """Weekly Monday 10:00-11:00 UTC series starting 2024-01-01."""
    return EventTemplate.model_validate(sample_event)


@pytest.fixture
def make_template():
    """Factory for templates with sensible defaults."""

    def _make(
        id="evt",
        owner_id="u1",
        start=utc(2024, 1, 1, 10),
        end=utc(2024, 1, 1, 11),
        **kwargs,
    ) -> EventTemplate:
        return EventTemplate(id=id, owner_id=owner_id, start=start, end=end, **kwargs)

    return _make
