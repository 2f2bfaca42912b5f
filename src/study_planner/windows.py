"""Daily availability windows, break placement and free-slot calculation."""
from datetime import date, datetime, time, timedelta

from study_planner.config import FIXED_BREAKS, MIN_BLOCK_MINUTES
from study_planner.models import BreakInterval, BreakSpec, DayWindow, FreeSlot, TimeOfDay

ONE_DAY = timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, never negative."""
    return max(0, round((end - start).total_seconds() / 60))


def _day_midnight(anchor: date, day_index: int) -> datetime:
    return datetime.combine(anchor + timedelta(days=day_index), time())


def build_day_window(anchor: date, day_index: int, start: TimeOfDay, end: TimeOfDay) -> DayWindow:
    """Absolute availability window for ``anchor + day_index``.

    An end time not strictly after the start time means the window runs past
    midnight, so the end lands on the following calendar day.
    """
    midnight = _day_midnight(anchor, day_index)
    day_start = midnight + timedelta(hours=start.hour, minutes=start.minute)
    day_end = midnight + timedelta(hours=end.hour, minutes=end.minute)
    if day_end <= day_start:
        day_end += ONE_DAY
    return DayWindow(day_start, day_end)


def place_breaks(
    anchor: date,
    day_index: int,
    window: DayWindow,
    specs: tuple[BreakSpec, ...] = FIXED_BREAKS,
) -> list[BreakInterval]:
    """Materialize the recurring breaks that fall fully inside ``window``.

    A break whose nominal start precedes the window start is read as the
    following day's occurrence (overnight windows).
    """
    midnight = _day_midnight(anchor, day_index)
    breaks = []
    for spec in specs:
        start = midnight + timedelta(hours=spec.start_hour)
        end = midnight + timedelta(hours=spec.end_hour)
        if end <= start:
            end += ONE_DAY
        if start < window.start:
            start += ONE_DAY
            end += ONE_DAY
        if start >= window.start and end <= window.end:
            breaks.append(BreakInterval(spec.title, start, end))
    return sorted(breaks, key=lambda b: b.start)


def find_free_slots(window: DayWindow, breaks: list[BreakInterval]) -> list[FreeSlot]:
    """Subtract breaks from the window, keeping slots of at least one block."""
    slots = []
    cursor = window.start
    for brk in sorted(breaks, key=lambda b: b.start):
        if brk.start > cursor:
            slots.append(FreeSlot(cursor, brk.start))
        # Overlapping breaks must never move the cursor backwards
        if brk.end > cursor:
            cursor = brk.end
    if cursor < window.end:
        slots.append(FreeSlot(cursor, window.end))
    return [s for s in slots if minutes_between(s.start, s.end) >= MIN_BLOCK_MINUTES]
