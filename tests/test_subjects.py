# tests/test_subjects.py
import pytest

from study_planner.errors import SubjectNotFound, ValidationError
from study_planner.subjects import add_subject, delete_subject, get_subject_names, list_subjects


def test_add_and_list_subjects(tmp_db):
    add_subject(tmp_db, "alice", "  Math ")
    add_subject(tmp_db, "alice", "Physics")
    add_subject(tmp_db, "bob", "History")
    assert get_subject_names(tmp_db, "alice") == ["Math", "Physics"]
    assert [s["name"] for s in list_subjects(tmp_db, "bob")] == ["History"]


def test_add_duplicate_returns_existing(tmp_db):
    first = add_subject(tmp_db, "alice", "Math")
    second = add_subject(tmp_db, "alice", "Math")
    assert first["id"] == second["id"]
    assert get_subject_names(tmp_db, "alice") == ["Math"]


def test_add_empty_rejected(tmp_db):
    with pytest.raises(ValidationError):
        add_subject(tmp_db, "alice", "   ")


def test_delete_subject(tmp_db):
    s = add_subject(tmp_db, "alice", "Math")
    delete_subject(tmp_db, "alice", s["id"])
    assert list_subjects(tmp_db, "alice") == []


def test_delete_other_owners_subject_fails(tmp_db):
    s = add_subject(tmp_db, "alice", "Math")
    with pytest.raises(SubjectNotFound):
        delete_subject(tmp_db, "bob", s["id"])
    assert get_subject_names(tmp_db, "alice") == ["Math"]
