"""Greedy packing of study sessions into a day's free slots."""
from datetime import timedelta

from loguru import logger

from study_planner.models import FreeSlot, PlanItem
from study_planner.sizing import pick_block_length
from study_planner.windows import minutes_between


def pack_sessions(
    slots: list[FreeSlot],
    subjects: list[str],
    day_cap: int,
    preferred: int,
    cursor: int = 0,
) -> tuple[list[PlanItem], int]:
    """Fill slots in order with round-robin study blocks.

    Args:
        slots: The day's free slots, chronological.
        subjects: Subject names; ``subjects[cursor % len(subjects)]`` is next.
        day_cap: Maximum study minutes for the day.
        preferred: Preferred block length from the sizing policy.
        cursor: Round-robin position carried over from the previous day.

    Returns:
        The sessions created and the cursor to hand to the next day.
    """
    sessions = []
    scheduled = 0
    for slot in slots:
        position = slot.start
        while scheduled < day_cap:
            length = pick_block_length(
                preferred,
                minutes_between(position, slot.end),
                day_cap - scheduled,
            )
            if not length:
                break
            subject = subjects[cursor % len(subjects)]
            end = position + timedelta(minutes=length)
            sessions.append(PlanItem(title=f"Study {subject}", start=position, end=end, subject=subject))
            scheduled += length
            position = end
            cursor += 1
        if scheduled >= day_cap:
            break
    logger.debug(f"Packed {len(sessions)} sessions ({scheduled}/{day_cap} min)")
    return sessions, cursor
