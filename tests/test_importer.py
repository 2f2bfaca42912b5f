# tests/test_importer.py
from study_planner.importer import import_subjects, parse_subject_names, read_file_content
from study_planner.subjects import add_subject, get_subject_names


def test_read_txt_file(tmp_path):
    f = tmp_path / "datesheet.txt"
    f.write_text("Math\nPhysics\n")
    assert "Physics" in read_file_content(str(f))


def test_read_json_list(tmp_path):
    f = tmp_path / "subjects.json"
    f.write_text('["Chemistry", "Biology"]')
    assert read_file_content(str(f)).splitlines() == ["Chemistry", "Biology"]


def test_read_json_mapping(tmp_path):
    f = tmp_path / "subjects.json"
    f.write_text('{"subjects": ["Chemistry", "Biology"], "term": 2}')
    assert read_file_content(str(f)).splitlines() == ["Chemistry", "Biology"]


def test_read_yaml_file(tmp_path):
    f = tmp_path / "subjects.yaml"
    f.write_text("subjects:\n  - Economics\n  - Art\n")
    assert read_file_content(str(f)).splitlines() == ["Economics", "Art"]


def test_read_html_file(tmp_path):
    f = tmp_path / "datesheet.html"
    f.write_text("<ul><li>Math</li><li>History</li></ul>")
    assert parse_subject_names(read_file_content(str(f))) == ["Math", "History"]


def test_parse_subject_names():
    text = "- Math\n* Physics, Chemistry\n1. Biology\n2) math\n\n"
    assert parse_subject_names(text) == ["Math", "Physics", "Chemistry", "Biology"]


def test_import_subjects_skips_existing(tmp_path, tmp_db):
    add_subject(tmp_db, "alice", "Math")
    f = tmp_path / "notes.md"
    f.write_text("- Math\n- Physics\n- Physics\n")
    added = import_subjects(tmp_db, "alice", str(f))
    assert added == ["Physics"]
    assert get_subject_names(tmp_db, "alice") == ["Math", "Physics"]
