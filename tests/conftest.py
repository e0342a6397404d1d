from datetime import date

import pytest

from study_planner.models import Topic
from study_planner.sqlite_store import SQLiteStore
from study_planner.store import MemoryStore

USER = "u1"


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_db):
    """Run the test against both store backends."""
    if request.param == "memory":
        return MemoryStore()
    return SQLiteStore(tmp_db)


def make_topic(topic_id, subject_id="math", last=None, next_=None, reviews=None):
    """Build a Topic from ISO date strings."""
    last_date = date.fromisoformat(last) if last else None
    return Topic(
        id=topic_id,
        user_id=USER,
        subject_id=subject_id,
        title=topic_id.upper(),
        last_reviewed_at=last_date,
        next_review_at=date.fromisoformat(next_) if next_ else None,
        total_reviews=reviews if reviews is not None else (1 if last_date else 0),
    )
