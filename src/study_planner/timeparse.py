"""Wall-clock time parsing."""
import re

from study_planner.errors import FormatError
from study_planner.models import TimeOfDay

# ASCII digits only; int() alone would also take "+9", "0_9" and full-width digits
_COMPONENT = re.compile(r"[0-9]{1,2}")


def parse_time_of_day(value) -> TimeOfDay:
    """Parse an ``HH:MM`` string into a TimeOfDay.

    Raises FormatError when the value is not a string, a component is not
    one or two ASCII digits, or the hour/minute is out of range.
    """
    if not isinstance(value, str):
        raise FormatError("Time must be in HH:MM format")
    hours_str, _, minutes_str = value.partition(":")
    # Anything after a second colon (seconds) is ignored
    minutes_str = minutes_str.split(":", 1)[0]
    if not (_COMPONENT.fullmatch(hours_str) and _COMPONENT.fullmatch(minutes_str)):
        raise FormatError(f"Invalid time format: {value}")
    hours = int(hours_str)
    minutes = int(minutes_str)
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise FormatError(f"Invalid time format: {value}")
    return TimeOfDay(hours, minutes)
