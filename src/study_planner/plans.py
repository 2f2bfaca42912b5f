"""Storage of generated study plans and completion tracking."""
from datetime import datetime

from loguru import logger

from study_planner.db import get_connection
from study_planner.errors import PlanItemNotFound, PlanNotFound, ValidationError
from study_planner.models import PlanItem, StudyPlan


def _row_to_item(row) -> PlanItem:
    return PlanItem(
        id=row["id"],
        title=row["title"],
        start=datetime.fromisoformat(row["starts_at"]),
        end=datetime.fromisoformat(row["ends_at"]),
        subject=row["subject"],
        completed=bool(row["completed"]),
    )


def save_plan(db_path: str, owner: str, items: list[PlanItem], created_at: str | None = None) -> StudyPlan:
    """Store a finished plan for ``owner``; it becomes their current plan."""
    created_at = created_at or datetime.now().isoformat()
    conn = get_connection(db_path)
    cur = conn.execute(
        "INSERT INTO study_plans (owner, created_at) VALUES (?, ?)", (owner, created_at)
    )
    plan_id = cur.lastrowid
    conn.executemany(
        """INSERT INTO plan_items (plan_id, position, subject, title, starts_at, ends_at, completed)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        [
            (plan_id, pos, item.subject, item.title, item.start.isoformat(),
             item.end.isoformat(), int(item.completed))
            for pos, item in enumerate(items)
        ],
    )
    conn.commit()
    conn.close()
    logger.info(f"Saved plan {plan_id} for owner={owner} ({len(items)} items)")
    return get_plan(db_path, plan_id)


def get_plan(db_path: str, plan_id: int) -> StudyPlan | None:
    conn = get_connection(db_path)
    plan = conn.execute("SELECT * FROM study_plans WHERE id = ?", (plan_id,)).fetchone()
    if not plan:
        conn.close()
        return None
    rows = conn.execute(
        "SELECT * FROM plan_items WHERE plan_id = ? ORDER BY position", (plan_id,)
    ).fetchall()
    conn.close()
    return StudyPlan(
        id=plan["id"],
        owner=plan["owner"],
        created_at=plan["created_at"],
        items=[_row_to_item(r) for r in rows],
    )


def get_latest_plan(db_path: str, owner: str) -> StudyPlan | None:
    """Most recently created plan for the owner."""
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT id FROM study_plans WHERE owner = ? ORDER BY created_at DESC, id DESC LIMIT 1",
        (owner,),
    ).fetchone()
    conn.close()
    return get_plan(db_path, row["id"]) if row else None


def set_item_completed(db_path: str, owner: str, item_id: int, completed: bool) -> PlanItem:
    """Toggle completion of one item in the owner's latest plan."""
    if not isinstance(completed, bool):
        raise ValidationError("completed must be a boolean")
    plan = get_latest_plan(db_path, owner)
    if not plan:
        raise PlanNotFound("No study plan found")
    if not any(item.id == item_id for item in plan.items):
        raise PlanItemNotFound("Plan item not found")
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE plan_items SET completed = ? WHERE id = ? AND plan_id = ?",
        (int(completed), item_id, plan.id),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM plan_items WHERE id = ?", (item_id,)).fetchone()
    conn.close()
    return _row_to_item(row)
