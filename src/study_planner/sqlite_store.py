"""SQLite implementation of the StudyStore contract."""
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional

from study_planner.db import get_connection, init_db
from study_planner.errors import (
    DuplicatePlanError, PlanNotFoundError, SubjectNotFoundError, TopicNotFoundError,
)
from study_planner.models import DailyPlan, ReviewLog, Subject, Topic
from study_planner.store import new_id, now_iso

logger = logging.getLogger(__name__)


def _to_date(value: Optional[str]) -> Optional[date]:
    # Tolerate timestamps written by older clients; only the day matters.
    return date.fromisoformat(value[:10]) if value else None


def _from_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _subject_from_row(row: sqlite3.Row) -> Subject:
    return Subject(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        created_at=row["created_at"] or "",
        is_active=bool(row["is_active"]),
    )


def _topic_from_row(row: sqlite3.Row) -> Topic:
    return Topic(
        id=row["id"],
        user_id=row["user_id"],
        subject_id=row["subject_id"],
        title=row["title"],
        notes=row["notes"] or "",
        created_at=row["created_at"] or "",
        last_reviewed_at=_to_date(row["last_reviewed_at"]),
        next_review_at=_to_date(row["next_review_at"]),
        total_reviews=row["total_reviews"],
        last_score_percent=row["last_score_percent"],
    )


def _log_from_row(row: sqlite3.Row) -> ReviewLog:
    return ReviewLog(
        id=row["id"],
        user_id=row["user_id"],
        topic_id=row["topic_id"],
        reviewed_at=_to_date(row["reviewed_at"]),
        correct_answers=row["correct_answers"],
        score_percent=row["score_percent"],
        next_review_at_computed=_to_date(row["next_review_at_computed"]),
        review_note=row["review_note"] or "",
    )


def _plan_from_row(row: sqlite3.Row) -> DailyPlan:
    return DailyPlan(
        id=row["id"],
        user_id=row["user_id"],
        plan_date=_to_date(row["plan_date"]),
        topic_ids_selected=json.loads(row["topic_ids_selected"] or "[]"),
        topic_ids_completed=json.loads(row["topic_ids_completed"] or "[]"),
        created_at=row["created_at"] or "",
        updated_at=row["updated_at"] or "",
    )


class SQLiteStore:
    """File-backed StudyStore. Every call opens its own connection."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        init_db(db_path)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = get_connection(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # --- subjects ---
    def create_subject(self, user_id: str, name: str) -> Subject:
        subject = Subject(id=new_id(), user_id=user_id, name=name, created_at=now_iso())
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO subjects (id, user_id, name, created_at, is_active) VALUES (?, ?, ?, ?, 1)",
                (subject.id, user_id, name, subject.created_at),
            )
        return subject

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM subjects WHERE id = ?", (subject_id,)).fetchone()
        return _subject_from_row(row) if row else None

    def list_subjects(self, user_id: str, include_archived: bool = False) -> list[Subject]:
        query = "SELECT * FROM subjects WHERE user_id = ?"
        if not include_archived:
            query += " AND is_active = 1"
        with self._transaction() as conn:
            rows = conn.execute(query + " ORDER BY created_at, rowid", (user_id,)).fetchall()
        return [_subject_from_row(r) for r in rows]

    def list_active_subjects(self, user_id: str) -> list[Subject]:
        return self.list_subjects(user_id)

    def update_subject(self, subject_id: str, name: Optional[str] = None,
                       is_active: Optional[bool] = None) -> Subject:
        with self._transaction() as conn:
            if name is not None:
                conn.execute("UPDATE subjects SET name = ? WHERE id = ?", (name, subject_id))
            if is_active is not None:
                conn.execute("UPDATE subjects SET is_active = ? WHERE id = ?", (int(is_active), subject_id))
            row = conn.execute("SELECT * FROM subjects WHERE id = ?", (subject_id,)).fetchone()
        if row is None:
            raise SubjectNotFoundError(subject_id)
        return _subject_from_row(row)

    def delete_subject(self, subject_id: str) -> None:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM subjects WHERE id = ?", (subject_id,))
        if cur.rowcount == 0:
            raise SubjectNotFoundError(subject_id)

    # --- topics ---
    def create_topics(self, user_id: str, subject_id: str, titles: list[str]) -> list[Topic]:
        if self.get_subject(subject_id) is None:
            raise SubjectNotFoundError(subject_id)
        topics = [
            Topic(id=new_id(), user_id=user_id, subject_id=subject_id, title=title, created_at=now_iso())
            for title in titles
        ]
        with self._transaction() as conn:
            conn.executemany(
                "INSERT INTO topics (id, user_id, subject_id, title, notes, created_at) VALUES (?, ?, ?, ?, '', ?)",
                [(t.id, t.user_id, t.subject_id, t.title, t.created_at) for t in topics],
            )
        return topics

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM topics WHERE id = ?", (topic_id,)).fetchone()
        return _topic_from_row(row) if row else None

    def list_topics(self, user_id: str) -> list[Topic]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM topics WHERE user_id = ? ORDER BY created_at, rowid", (user_id,)
            ).fetchall()
        return [_topic_from_row(r) for r in rows]

    def list_topics_by_subject(self, subject_id: str) -> list[Topic]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM topics WHERE subject_id = ? ORDER BY created_at, rowid", (subject_id,)
            ).fetchall()
        return [_topic_from_row(r) for r in rows]

    def update_topic_notes(self, topic_id: str, notes: str) -> Topic:
        with self._transaction() as conn:
            conn.execute("UPDATE topics SET notes = ? WHERE id = ?", (notes, topic_id))
            row = conn.execute("SELECT * FROM topics WHERE id = ?", (topic_id,)).fetchone()
        if row is None:
            raise TopicNotFoundError(topic_id)
        return _topic_from_row(row)

    def _update_schedule(self, conn: sqlite3.Connection, topic_id: str,
                         last_reviewed_at: Optional[date], next_review_at: Optional[date],
                         total_reviews: int, last_score_percent: Optional[int]) -> Topic:
        conn.execute(
            """UPDATE topics SET last_reviewed_at=?, next_review_at=?, total_reviews=?, last_score_percent=?
            WHERE id=?""",
            (_from_date(last_reviewed_at), _from_date(next_review_at), total_reviews,
             last_score_percent, topic_id),
        )
        row = conn.execute("SELECT * FROM topics WHERE id = ?", (topic_id,)).fetchone()
        if row is None:
            raise TopicNotFoundError(topic_id)
        return _topic_from_row(row)

    def update_topic_schedule(self, topic_id: str, last_reviewed_at: Optional[date],
                              next_review_at: Optional[date], total_reviews: int,
                              last_score_percent: Optional[int]) -> Topic:
        with self._transaction() as conn:
            return self._update_schedule(conn, topic_id, last_reviewed_at, next_review_at,
                                         total_reviews, last_score_percent)

    def delete_topic(self, topic_id: str) -> None:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM topics WHERE id = ?", (topic_id,))
        if cur.rowcount == 0:
            raise TopicNotFoundError(topic_id)

    # --- review logs ---
    def _insert_log(self, conn: sqlite3.Connection, user_id: str, topic_id: str,
                    correct_answers: int, score_percent: int, next_review_at: date,
                    note: str, reviewed_at: date) -> ReviewLog:
        log = ReviewLog(
            id=new_id(), user_id=user_id, topic_id=topic_id, reviewed_at=reviewed_at,
            correct_answers=correct_answers, score_percent=score_percent,
            next_review_at_computed=next_review_at, review_note=note,
        )
        try:
            conn.execute(
                """INSERT INTO review_logs
                (id, user_id, topic_id, reviewed_at, correct_answers, score_percent,
                 next_review_at_computed, review_note)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (log.id, user_id, topic_id, reviewed_at.isoformat(), correct_answers,
                 score_percent, next_review_at.isoformat(), note),
            )
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY" in str(e):
                raise TopicNotFoundError(topic_id) from e
            raise
        return log

    def append_review_log(self, user_id: str, topic_id: str, correct_answers: int,
                          score_percent: int, next_review_at: date, note: str,
                          reviewed_at: date) -> ReviewLog:
        with self._transaction() as conn:
            return self._insert_log(conn, user_id, topic_id, correct_answers, score_percent,
                                    next_review_at, note, reviewed_at)

    def list_review_logs(self, topic_id: str) -> list[ReviewLog]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM review_logs WHERE topic_id = ? ORDER BY reviewed_at DESC, rowid DESC",
                (topic_id,),
            ).fetchall()
        return [_log_from_row(r) for r in rows]

    # --- daily plans ---
    def get_plan(self, user_id: str, plan_date: date) -> Optional[DailyPlan]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM daily_plans WHERE user_id = ? AND plan_date = ?",
                (user_id, plan_date.isoformat()),
            ).fetchone()
        return _plan_from_row(row) if row else None

    def list_plans(self, user_id: str) -> list[DailyPlan]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM daily_plans WHERE user_id = ? ORDER BY plan_date DESC", (user_id,)
            ).fetchall()
        return [_plan_from_row(r) for r in rows]

    def create_plan(self, user_id: str, plan_date: date, topic_ids: list[str]) -> DailyPlan:
        now = now_iso()
        plan = DailyPlan(id=new_id(), user_id=user_id, plan_date=plan_date,
                         topic_ids_selected=list(topic_ids), created_at=now, updated_at=now)
        try:
            with self._transaction() as conn:
                conn.execute(
                    """INSERT INTO daily_plans
                    (id, user_id, plan_date, topic_ids_selected, topic_ids_completed, created_at, updated_at)
                    VALUES (?, ?, ?, ?, '[]', ?, ?)""",
                    (plan.id, user_id, plan_date.isoformat(), json.dumps(plan.topic_ids_selected), now, now),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicatePlanError(user_id, plan_date) from e
        return plan

    def _load_plan(self, conn: sqlite3.Connection, plan_id: str) -> DailyPlan:
        row = conn.execute("SELECT * FROM daily_plans WHERE id = ?", (plan_id,)).fetchone()
        if row is None:
            raise PlanNotFoundError(f"Plan not found: {plan_id}")
        return _plan_from_row(row)

    def _save_plan_lists(self, conn: sqlite3.Connection, plan: DailyPlan) -> DailyPlan:
        plan.updated_at = now_iso()
        conn.execute(
            "UPDATE daily_plans SET topic_ids_selected=?, topic_ids_completed=?, updated_at=? WHERE id=?",
            (json.dumps(plan.topic_ids_selected), json.dumps(plan.topic_ids_completed),
             plan.updated_at, plan.id),
        )
        return plan

    def _append_completed(self, conn: sqlite3.Connection, plan_id: str, topic_id: str) -> DailyPlan:
        plan = self._load_plan(conn, plan_id)
        if topic_id in plan.topic_ids_completed:
            return plan
        plan.topic_ids_completed.append(topic_id)
        return self._save_plan_lists(conn, plan)

    def append_completed(self, plan_id: str, topic_id: str) -> DailyPlan:
        with self._transaction() as conn:
            return self._append_completed(conn, plan_id, topic_id)

    def remove_completed(self, plan_id: str, topic_id: str) -> DailyPlan:
        with self._transaction() as conn:
            plan = self._load_plan(conn, plan_id)
            plan.topic_ids_completed = [t for t in plan.topic_ids_completed if t != topic_id]
            return self._save_plan_lists(conn, plan)

    def set_plan_topics(self, plan_id: str, topic_ids: list[str]) -> DailyPlan:
        with self._transaction() as conn:
            plan = self._load_plan(conn, plan_id)
            plan.topic_ids_selected = list(topic_ids)
            plan.topic_ids_completed = [t for t in plan.topic_ids_completed if t in topic_ids]
            return self._save_plan_lists(conn, plan)

    # --- composite ---
    def record_review(self, user_id: str, topic_id: str, plan_id: str, correct_answers: int,
                      score_percent: int, reviewed_at: date, next_review_at: date,
                      note: str) -> tuple[ReviewLog, Topic, DailyPlan]:
        """Append the log, advance the topic and complete it in one transaction."""
        with self._transaction() as conn:
            row = conn.execute("SELECT total_reviews FROM topics WHERE id = ?", (topic_id,)).fetchone()
            if row is None:
                raise TopicNotFoundError(topic_id)
            log = self._insert_log(conn, user_id, topic_id, correct_answers, score_percent,
                                   next_review_at, note, reviewed_at)
            topic = self._update_schedule(conn, topic_id, reviewed_at, next_review_at,
                                          row["total_reviews"] + 1, score_percent)
            plan = self._append_completed(conn, plan_id, topic_id)
        return log, topic, plan

    # --- settings ---
    def get_setting(self, user_id: str, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT value FROM user_settings WHERE user_id = ? AND key = ?", (user_id, key)
            ).fetchone()
        return row["value"] if row else default

    def set_setting(self, user_id: str, key: str, value: str) -> None:
        with self._transaction() as conn:
            conn.execute(
                """INSERT INTO user_settings (user_id, key, value) VALUES (?, ?, ?)
                ON CONFLICT(user_id, key) DO UPDATE SET value=excluded.value""",
                (user_id, key, value),
            )

    def reset_user(self, user_id: str) -> None:
        with self._transaction() as conn:
            for table in ("review_logs", "topics", "subjects", "daily_plans", "user_settings"):
                conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
        logger.info("Removed all data for user %s", user_id)
