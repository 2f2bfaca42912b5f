"""Process-wide settings and scheduling constants."""
import os
from pathlib import Path

from tzlocal import get_localzone_name

from study_planner.models import BreakSpec


def local_timezone_name() -> str:
    """IANA name of the system time zone, or UTC when it cannot be determined."""
    try:
        return get_localzone_name() or "UTC"
    except (LookupError, ValueError, OSError):
        return "UTC"


DEFAULT_DB_PATH = os.getenv(
    "STUDY_PLANNER_DB", str(Path.home() / ".study_planner" / "planner.db")
)
DEFAULT_OWNER = os.getenv("STUDY_PLANNER_OWNER", "local")
DEFAULT_TIMEZONE = os.getenv("STUDY_PLANNER_TZ") or local_timezone_name()

LOG_LEVEL = os.getenv("STUDY_PLANNER_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("STUDY_PLANNER_LOG_FILE")

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost")

MIN_BLOCK_MINUTES = 60
MAX_BLOCK_MINUTES = 120
# Per-subject share of free time needed before long blocks are offered
LONG_BLOCK_PER_SUBJECT_MINUTES = 90
MAX_STUDY_HOURS_PER_DAY = 8
MAX_PLANNED_DAYS = 60
MAX_PLAN_ITEMS = 1000

FIXED_BREAKS = (
    BreakSpec("Lunch Break", 13, 14),
    BreakSpec("Snack Break", 17, 18),
    BreakSpec("Dinner Break", 20, 21),
)
