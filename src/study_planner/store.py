"""Storage contract shared by the planner and its two backends.

`SQLiteStore` (study_planner.sqlite_store) persists to a file; `MemoryStore`
keeps everything in process. Both return detached copies, so mutating a
returned object never changes stored state.
"""
import copy
import logging
import uuid
from datetime import date, datetime
from typing import Optional, Protocol

from study_planner.errors import (
    DuplicatePlanError, PlanNotFoundError, SubjectNotFoundError, TopicNotFoundError,
)
from study_planner.models import DailyPlan, ReviewLog, Subject, Topic

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.now().isoformat()


class StudyStore(Protocol):
    # --- subjects ---
    def create_subject(self, user_id: str, name: str) -> Subject: ...
    def get_subject(self, subject_id: str) -> Optional[Subject]: ...
    def list_subjects(self, user_id: str, include_archived: bool = False) -> list[Subject]: ...
    def list_active_subjects(self, user_id: str) -> list[Subject]: ...
    def update_subject(self, subject_id: str, name: Optional[str] = None,
                       is_active: Optional[bool] = None) -> Subject: ...
    def delete_subject(self, subject_id: str) -> None: ...

    # --- topics ---
    def create_topics(self, user_id: str, subject_id: str, titles: list[str]) -> list[Topic]: ...
    def get_topic(self, topic_id: str) -> Optional[Topic]: ...
    def list_topics(self, user_id: str) -> list[Topic]: ...
    def list_topics_by_subject(self, subject_id: str) -> list[Topic]: ...
    def update_topic_notes(self, topic_id: str, notes: str) -> Topic: ...
    def update_topic_schedule(self, topic_id: str, last_reviewed_at: Optional[date],
                              next_review_at: Optional[date], total_reviews: int,
                              last_score_percent: Optional[int]) -> Topic: ...
    def delete_topic(self, topic_id: str) -> None: ...

    # --- review logs ---
    def append_review_log(self, user_id: str, topic_id: str, correct_answers: int,
                          score_percent: int, next_review_at: date, note: str,
                          reviewed_at: date) -> ReviewLog: ...
    def list_review_logs(self, topic_id: str) -> list[ReviewLog]: ...

    # --- daily plans ---
    def get_plan(self, user_id: str, plan_date: date) -> Optional[DailyPlan]: ...
    def list_plans(self, user_id: str) -> list[DailyPlan]: ...
    def create_plan(self, user_id: str, plan_date: date, topic_ids: list[str]) -> DailyPlan: ...
    def append_completed(self, plan_id: str, topic_id: str) -> DailyPlan: ...
    def remove_completed(self, plan_id: str, topic_id: str) -> DailyPlan: ...
    def set_plan_topics(self, plan_id: str, topic_ids: list[str]) -> DailyPlan: ...

    # --- composite ---
    def record_review(self, user_id: str, topic_id: str, plan_id: str, correct_answers: int,
                      score_percent: int, reviewed_at: date, next_review_at: date,
                      note: str) -> tuple[ReviewLog, Topic, DailyPlan]: ...

    # --- settings ---
    def get_setting(self, user_id: str, key: str, default: Optional[str] = None) -> Optional[str]: ...
    def set_setting(self, user_id: str, key: str, value: str) -> None: ...

    def reset_user(self, user_id: str) -> None: ...


class MemoryStore:
    """In-process implementation of StudyStore."""

    def __init__(self) -> None:
        self._subjects: dict[str, Subject] = {}
        self._topics: dict[str, Topic] = {}
        self._logs: dict[str, ReviewLog] = {}
        self._plans: dict[str, DailyPlan] = {}
        self._settings: dict[tuple[str, str], str] = {}

    # --- lookups ---
    def _subject(self, subject_id: str) -> Subject:
        try:
            return self._subjects[subject_id]
        except KeyError:
            raise SubjectNotFoundError(subject_id) from None

    def _topic(self, topic_id: str) -> Topic:
        try:
            return self._topics[topic_id]
        except KeyError:
            raise TopicNotFoundError(topic_id) from None

    def _plan(self, plan_id: str) -> DailyPlan:
        try:
            return self._plans[plan_id]
        except KeyError:
            raise PlanNotFoundError(f"Plan not found: {plan_id}") from None

    # --- subjects ---
    def create_subject(self, user_id: str, name: str) -> Subject:
        subject = Subject(id=new_id(), user_id=user_id, name=name, created_at=now_iso())
        self._subjects[subject.id] = subject
        return copy.copy(subject)

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        subject = self._subjects.get(subject_id)
        return copy.copy(subject) if subject else None

    def list_subjects(self, user_id: str, include_archived: bool = False) -> list[Subject]:
        return [
            copy.copy(s) for s in self._subjects.values()
            if s.user_id == user_id and (include_archived or s.is_active)
        ]

    def list_active_subjects(self, user_id: str) -> list[Subject]:
        return self.list_subjects(user_id)

    def update_subject(self, subject_id: str, name: Optional[str] = None,
                       is_active: Optional[bool] = None) -> Subject:
        subject = self._subject(subject_id)
        if name is not None:
            subject.name = name
        if is_active is not None:
            subject.is_active = is_active
        return copy.copy(subject)

    def delete_subject(self, subject_id: str) -> None:
        self._subject(subject_id)
        for topic_id in [t.id for t in self._topics.values() if t.subject_id == subject_id]:
            self._delete_topic(topic_id)
        del self._subjects[subject_id]

    # --- topics ---
    def create_topics(self, user_id: str, subject_id: str, titles: list[str]) -> list[Topic]:
        self._subject(subject_id)
        created = []
        for title in titles:
            topic = Topic(id=new_id(), user_id=user_id, subject_id=subject_id,
                          title=title, created_at=now_iso())
            self._topics[topic.id] = topic
            created.append(copy.copy(topic))
        return created

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        topic = self._topics.get(topic_id)
        return copy.copy(topic) if topic else None

    def list_topics(self, user_id: str) -> list[Topic]:
        return [copy.copy(t) for t in self._topics.values() if t.user_id == user_id]

    def list_topics_by_subject(self, subject_id: str) -> list[Topic]:
        return [copy.copy(t) for t in self._topics.values() if t.subject_id == subject_id]

    def update_topic_notes(self, topic_id: str, notes: str) -> Topic:
        topic = self._topic(topic_id)
        topic.notes = notes
        return copy.copy(topic)

    def update_topic_schedule(self, topic_id: str, last_reviewed_at: Optional[date],
                              next_review_at: Optional[date], total_reviews: int,
                              last_score_percent: Optional[int]) -> Topic:
        topic = self._topic(topic_id)
        topic.last_reviewed_at = last_reviewed_at
        topic.next_review_at = next_review_at
        topic.total_reviews = total_reviews
        topic.last_score_percent = last_score_percent
        return copy.copy(topic)

    def _delete_topic(self, topic_id: str) -> None:
        for log_id in [l.id for l in self._logs.values() if l.topic_id == topic_id]:
            del self._logs[log_id]
        del self._topics[topic_id]

    def delete_topic(self, topic_id: str) -> None:
        self._topic(topic_id)
        self._delete_topic(topic_id)

    # --- review logs ---
    def append_review_log(self, user_id: str, topic_id: str, correct_answers: int,
                          score_percent: int, next_review_at: date, note: str,
                          reviewed_at: date) -> ReviewLog:
        self._topic(topic_id)
        log = ReviewLog(
            id=new_id(), user_id=user_id, topic_id=topic_id, reviewed_at=reviewed_at,
            correct_answers=correct_answers, score_percent=score_percent,
            next_review_at_computed=next_review_at, review_note=note,
        )
        self._logs[log.id] = log
        return log

    def list_review_logs(self, topic_id: str) -> list[ReviewLog]:
        # Newest insert first so same-day reviews stay newest first after the stable sort.
        logs = [l for l in reversed(self._logs.values()) if l.topic_id == topic_id]
        return sorted(logs, key=lambda l: l.reviewed_at, reverse=True)

    # --- daily plans ---
    def get_plan(self, user_id: str, plan_date: date) -> Optional[DailyPlan]:
        for plan in self._plans.values():
            if plan.user_id == user_id and plan.plan_date == plan_date:
                return copy.deepcopy(plan)
        return None

    def list_plans(self, user_id: str) -> list[DailyPlan]:
        plans = [copy.deepcopy(p) for p in self._plans.values() if p.user_id == user_id]
        return sorted(plans, key=lambda p: p.plan_date, reverse=True)

    def create_plan(self, user_id: str, plan_date: date, topic_ids: list[str]) -> DailyPlan:
        if self.get_plan(user_id, plan_date) is not None:
            raise DuplicatePlanError(user_id, plan_date)
        now = now_iso()
        plan = DailyPlan(id=new_id(), user_id=user_id, plan_date=plan_date,
                         topic_ids_selected=list(topic_ids), created_at=now, updated_at=now)
        self._plans[plan.id] = plan
        return copy.deepcopy(plan)

    def append_completed(self, plan_id: str, topic_id: str) -> DailyPlan:
        plan = self._plan(plan_id)
        if topic_id not in plan.topic_ids_completed:
            plan.topic_ids_completed.append(topic_id)
            plan.updated_at = now_iso()
        return copy.deepcopy(plan)

    def remove_completed(self, plan_id: str, topic_id: str) -> DailyPlan:
        plan = self._plan(plan_id)
        plan.topic_ids_completed = [t for t in plan.topic_ids_completed if t != topic_id]
        plan.updated_at = now_iso()
        return copy.deepcopy(plan)

    def set_plan_topics(self, plan_id: str, topic_ids: list[str]) -> DailyPlan:
        plan = self._plan(plan_id)
        plan.topic_ids_selected = list(topic_ids)
        plan.topic_ids_completed = [t for t in plan.topic_ids_completed if t in topic_ids]
        plan.updated_at = now_iso()
        return copy.deepcopy(plan)

    # --- composite ---
    def record_review(self, user_id: str, topic_id: str, plan_id: str, correct_answers: int,
                      score_percent: int, reviewed_at: date, next_review_at: date,
                      note: str) -> tuple[ReviewLog, Topic, DailyPlan]:
        # Resolve everything up front so a missing row leaves no partial write.
        topic = self._topic(topic_id)
        self._plan(plan_id)
        log = self.append_review_log(user_id, topic_id, correct_answers, score_percent,
                                     next_review_at, note, reviewed_at)
        updated = self.update_topic_schedule(
            topic_id, reviewed_at, next_review_at, topic.total_reviews + 1, score_percent,
        )
        plan = self.append_completed(plan_id, topic_id)
        return log, updated, plan

    # --- settings ---
    def get_setting(self, user_id: str, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._settings.get((user_id, key), default)

    def set_setting(self, user_id: str, key: str, value: str) -> None:
        self._settings[(user_id, key)] = value

    def reset_user(self, user_id: str) -> None:
        self._logs = {k: v for k, v in self._logs.items() if v.user_id != user_id}
        self._topics = {k: v for k, v in self._topics.items() if v.user_id != user_id}
        self._subjects = {k: v for k, v in self._subjects.items() if v.user_id != user_id}
        self._plans = {k: v for k, v in self._plans.items() if v.user_id != user_id}
        self._settings = {k: v for k, v in self._settings.items() if k[0] != user_id}
        logger.info("Removed all data for user %s", user_id)
