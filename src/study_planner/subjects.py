"""Per-owner subject list."""
from datetime import datetime

from study_planner.db import get_connection
from study_planner.errors import SubjectNotFound, ValidationError


def list_subjects(db_path: str, owner: str) -> list[dict]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT id, name, created_at FROM subjects WHERE owner = ? ORDER BY id", (owner,)
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_subject_names(db_path: str, owner: str) -> list[str]:
    return [s["name"] for s in list_subjects(db_path, owner)]


def add_subject(db_path: str, owner: str, name: str) -> dict:
    """Add a subject, returning the existing row if the name is already stored."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name required")
    conn = get_connection(db_path)
    conn.execute(
        "INSERT OR IGNORE INTO subjects (owner, name, created_at) VALUES (?, ?, ?)",
        (owner, name, datetime.now().isoformat()),
    )
    conn.commit()
    row = conn.execute(
        "SELECT id, name, created_at FROM subjects WHERE owner = ? AND name = ?", (owner, name)
    ).fetchone()
    conn.close()
    return dict(row)


def delete_subject(db_path: str, owner: str, subject_id: int) -> None:
    conn = get_connection(db_path)
    cur = conn.execute("DELETE FROM subjects WHERE id = ? AND owner = ?", (subject_id, owner))
    conn.commit()
    conn.close()
    if cur.rowcount == 0:
        raise SubjectNotFound("Subject not found")
