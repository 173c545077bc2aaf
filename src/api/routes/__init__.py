"""API route modules."""

from .availability import router as availability_router
from .conflicts import router as conflicts_router
from .health import router as health_router
from .occurrences import router as occurrences_router

__all__ = ["availability_router", "conflicts_router", "health_router", "occurrences_router"]
