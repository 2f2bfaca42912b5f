"""Plan assembly and validated planning runs.

``build_plan`` is the engine: it walks day indices in order, builds each day's
window, breaks and free slots, packs sessions into the free slots and merges
them with the breaks. ``create_plan`` wraps it with the request validation and
clamping rules and reports failures as a ``PlanResult`` error instead of
raising.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from loguru import logger

from study_planner.config import (
    MAX_PLAN_ITEMS,
    MAX_PLANNED_DAYS,
    MAX_STUDY_HOURS_PER_DAY,
    MIN_BLOCK_MINUTES,
)
from study_planner.errors import FormatError, ValidationError
from study_planner.models import PlanError, PlanItem, PlanResult, TimeOfDay
from study_planner.packer import pack_sessions
from study_planner.sizing import preferred_block_minutes
from study_planner.timeparse import parse_time_of_day
from study_planner.windows import build_day_window, find_free_slots, minutes_between, place_breaks

MINUTES_PER_DAY = 24 * 60


@dataclass
class PlanRequest:
    subjects: Union[list, str, None] = None
    daily_start_time: str = "09:00"
    daily_end_time: str = "17:00"
    num_days: object = 1
    start_date: Union[str, date, None] = None
    max_hours_per_day: object = None
    datesheet_path: Optional[str] = None


def build_plan(
    anchor: date,
    subjects: list[str],
    total_days: int,
    start: TimeOfDay,
    end: TimeOfDay,
    max_minutes_per_day: int,
) -> list[PlanItem]:
    """Build the ordered item sequence for ``total_days`` days from ``anchor``."""
    items = []
    cursor = 0
    for day_index in range(total_days):
        window = build_day_window(anchor, day_index, start, end)
        breaks = place_breaks(anchor, day_index, window)
        slots = find_free_slots(window, breaks)
        break_items = [PlanItem(title=b.title, start=b.start, end=b.end) for b in breaks]

        free_minutes = sum(minutes_between(s.start, s.end) for s in slots)
        preferred = preferred_block_minutes(free_minutes, len(subjects))
        if not free_minutes or not preferred:
            logger.debug(f"Day {day_index}: no room for study, breaks only")
            items.extend(break_items)
            continue

        day_cap = min(max_minutes_per_day, free_minutes)
        sessions, cursor = pack_sessions(slots, subjects, day_cap, preferred, cursor)
        # sorted() is stable; sessions never share a start with a break
        items.extend(sorted(sessions + break_items, key=lambda item: item.start))
    return items


def normalize_subjects(value) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple)):
        return []
    names = (str(v).strip() for v in value)
    return [n for n in names if n]


def parse_start_date(value) -> date:
    """Anchor date for a run; today when no value is given."""
    if value is None or value == "":
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValidationError("Invalid start date format")


def clamp_days(value) -> int:
    try:
        days = int(float(value))
    except (TypeError, ValueError, OverflowError):
        days = 1
    return max(1, min(MAX_PLANNED_DAYS, days))


def window_minutes(start: TimeOfDay, end: TimeOfDay) -> int:
    minutes = end.total_minutes - start.total_minutes
    if minutes <= 0:
        minutes += MINUTES_PER_DAY
    return minutes


def daily_cap_minutes(max_hours, window: int) -> int:
    """Per-day study minutes from an optional hour budget."""
    try:
        hours = float(max_hours)
    except (TypeError, ValueError):
        hours = math.nan
    if not math.isfinite(hours):
        hours = min(MAX_STUDY_HOURS_PER_DAY, window / 60)
    hours = min(MAX_STUDY_HOURS_PER_DAY, max(1, hours))
    return min(math.floor(hours * 60 + 0.5), window)


def _plan_from_request(request: PlanRequest) -> list[PlanItem]:
    subjects = normalize_subjects(request.subjects)
    if not subjects:
        raise ValidationError("At least one subject is required")
    anchor = parse_start_date(request.start_date)
    start = parse_time_of_day(request.daily_start_time)
    end = parse_time_of_day(request.daily_end_time)
    total_days = clamp_days(request.num_days)

    window = window_minutes(start, end)
    if window < MIN_BLOCK_MINUTES:
        raise ValidationError("Daily availability window is too short for any study session")
    max_minutes = daily_cap_minutes(request.max_hours_per_day, window)

    if request.datesheet_path:
        logger.info(f"Plan requested with datesheet: {request.datesheet_path}")

    items = build_plan(anchor, subjects, total_days, start, end, max_minutes)
    if not any(item.is_study for item in items):
        raise ValidationError(
            "Unable to build a study plan with the provided availability. "
            "Try extending your study window or reducing subjects."
        )
    if len(items) > MAX_PLAN_ITEMS:
        raise ValidationError("Generated plan is too large. Reduce the planning window or subject list.")
    logger.info(
        f"Built plan: {len(subjects)} subjects, {total_days} days from {anchor.isoformat()}, "
        f"{len(items)} items"
    )
    return items


def create_plan(request: PlanRequest) -> PlanResult:
    """Run one validated planning pass; failures come back as ``result.error``."""
    try:
        items = _plan_from_request(request)
    except FormatError as e:
        logger.warning(f"Plan rejected: {e}")
        return PlanResult(error=PlanError("format", str(e)))
    except ValidationError as e:
        logger.warning(f"Plan rejected: {e}")
        return PlanResult(error=PlanError("validation", str(e)))
    return PlanResult(items=items)
