"""Tests for database initialization and connection management."""
import sqlite3

import pytest

from study_planner.db import DEFAULT_DB_PATH, get_connection, init_db, resolve_db_path


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    expected = {"subjects", "topics", "review_logs", "daily_plans", "user_settings"}
    assert expected.issubset(tables)
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "planner.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "planner.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO user_settings (user_id, key, value) VALUES ('u1', 'test', 'val')")
    row = conn.execute("SELECT key, value FROM user_settings WHERE key='test'").fetchone()
    assert row["key"] == "test"
    conn.close()


def test_daily_plans_unique_per_user_and_date(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO daily_plans (id, user_id, plan_date) VALUES ('p1', 'u1', '2024-01-05')")
    conn.execute("INSERT INTO daily_plans (id, user_id, plan_date) VALUES ('p2', 'u2', '2024-01-05')")
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO daily_plans (id, user_id, plan_date) VALUES ('p3', 'u1', '2024-01-05')")
    conn.close()


def test_review_log_score_out_of_range_rejected(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO subjects (id, user_id, name) VALUES ('s1', 'u1', 'Math')")
    conn.execute("INSERT INTO topics (id, user_id, subject_id, title) VALUES ('t1', 'u1', 's1', 'A')")
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            """INSERT INTO review_logs (id, user_id, topic_id, reviewed_at, correct_answers,
            score_percent, next_review_at_computed) VALUES ('r1', 'u1', 't1', '2024-01-05', 11, 110, '2024-01-20')"""
        )
    conn.close()


def test_resolve_db_path_default(monkeypatch):
    monkeypatch.delenv("STUDY_PLANNER_DB", raising=False)
    assert resolve_db_path() == DEFAULT_DB_PATH


def test_resolve_db_path_from_env(monkeypatch, tmp_db):
    monkeypatch.setenv("STUDY_PLANNER_DB", tmp_db)
    assert resolve_db_path() == tmp_db
