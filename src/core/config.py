"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "db" / "calendar-engine.db"

# =============================================================================
# RECURRENCE EXPANSION
# =============================================================================

MAX_OCCURRENCES = 500  # Per expand() call; truncates instead of failing

# =============================================================================
# AVAILABILITY
# =============================================================================

DEFAULT_SLOT_MINUTES = 30
MAX_WINDOW_MINUTES = 2880  # Time-of-day windows may span two calendar days
MAX_FREE_SLOTS = 500
WAKING_HOURS_START = 6  # Daily-aggregate band, local hours
WAKING_HOURS_END = 22
DEFAULT_RANGE_DAYS = 14
MAX_RANGE_DAYS = 366
HIGH_AVAILABILITY_HOURS = 8  # Heat-map threshold for a "high" day

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"

# =============================================================================
# API CONFIGURATION
# =============================================================================

REFERENCE_TIMEZONE = os.environ.get("REFERENCE_TIMEZONE", "UTC")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
MAX_EVENTS_PER_REQUEST = int(os.environ.get("MAX_EVENTS_PER_REQUEST", "5000"))
API_VERSION = "1.0.0"
