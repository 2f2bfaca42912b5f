import pytest

from study_planner.db import init_db


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary, initialized SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    init_db(db_path)
    return db_path
