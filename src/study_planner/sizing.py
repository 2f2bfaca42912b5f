"""Study block sizing policy."""
from study_planner.config import (
    LONG_BLOCK_PER_SUBJECT_MINUTES,
    MAX_BLOCK_MINUTES,
    MIN_BLOCK_MINUTES,
)


def preferred_block_minutes(free_minutes: int, subject_count: int) -> int:
    """Preferred session length for a day, or 0 if no session fits.

    Long blocks are only offered when every subject can get at least
    LONG_BLOCK_PER_SUBJECT_MINUTES of the day's free time.
    """
    if free_minutes < MIN_BLOCK_MINUTES or subject_count <= 0:
        return 0
    per_subject = free_minutes / subject_count
    if per_subject >= LONG_BLOCK_PER_SUBJECT_MINUTES and free_minutes >= MAX_BLOCK_MINUTES:
        return MAX_BLOCK_MINUTES
    return MIN_BLOCK_MINUTES


def pick_block_length(preferred: int, slot_remaining: int, cap_remaining: int) -> int:
    """Length of the next block given what is left in the slot and the day cap."""
    if preferred and slot_remaining >= preferred and cap_remaining >= preferred:
        return preferred
    if slot_remaining >= MIN_BLOCK_MINUTES and cap_remaining >= MIN_BLOCK_MINUTES:
        return MIN_BLOCK_MINUTES
    return 0
