"""
Error taxonomy for the availability engine.

Every error carries a stable ``code`` so the HTTP layer can translate it
without inspecting messages.
"""


class EngineError(Exception):
    """Base class for all engine input errors."""

    code = "INVALID_REQUEST"

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class InvalidPattern(EngineError):
    """Recurrence pattern is malformed (bad interval, weekday or frequency tag)."""

    code = "INVALID_PATTERN"


class InvalidWindow(EngineError):
    """Query window or interval is empty, inverted or not timezone-aware."""

    code = "INVALID_WINDOW"


class InvalidTemplate(EngineError):
    """Event template instants or timezone are unusable."""

    code = "INVALID_TEMPLATE"


class AmbiguousRecurrence(UserWarning):
    """Issued when a ``custom`` pattern is expanded as daily-by-interval."""
