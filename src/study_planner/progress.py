"""Completion statistics for a stored study plan."""
from study_planner.models import StudyPlan


def get_progress_label(pct: float) -> str:
    if pct >= 100:
        return "DONE"
    elif pct >= 65:
        return "ON TRACK"
    elif pct >= 30:
        return "IN PROGRESS"
    return "JUST STARTED"


def get_progress_color(pct: float) -> str:
    if pct >= 100:
        return "green"
    elif pct >= 65:
        return "yellow"
    elif pct >= 30:
        return "dark_orange"
    return "red"


def get_plan_progress(plan: StudyPlan | None) -> dict:
    sessions = [i for i in plan.items if i.is_study] if plan else []
    done = [i for i in sessions if i.completed]
    by_subject = {}
    for item in sessions:
        entry = by_subject.setdefault(item.subject, {"sessions": 0, "completed": 0, "minutes": 0})
        entry["sessions"] += 1
        entry["minutes"] += item.minutes
        if item.completed:
            entry["completed"] += 1
    pct = (len(done) / len(sessions) * 100) if sessions else 0.0
    return {
        "sessions_total": len(sessions),
        "sessions_completed": len(done),
        "completed_pct": round(pct, 1),
        "minutes_planned": sum(i.minutes for i in sessions),
        "minutes_completed": sum(i.minutes for i in done),
        "subjects": by_subject,
    }
