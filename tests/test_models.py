"""Tests for data model classes."""
import dataclasses
from datetime import date

import pytest

from study_planner.models import (
    DailyPlan, PerformanceTier, PlanStats, ReviewLog, Subject, Topic, TopicStatus, UserSettings,
)


def test_subject_defaults_active():
    s = Subject(id="s1", user_id="u1", name="Math")
    assert s.is_active is True


def test_topic_defaults_never_reviewed():
    t = Topic(id="t1", user_id="u1", subject_id="s1", title="Fractions")
    assert t.last_reviewed_at is None
    assert t.next_review_at is None
    assert t.total_reviews == 0
    assert t.last_score_percent is None
    assert t.notes == ""


def test_review_log_is_immutable():
    log = ReviewLog(
        id="r1", user_id="u1", topic_id="t1", reviewed_at=date(2024, 1, 5),
        correct_answers=9, score_percent=90, next_review_at_computed=date(2024, 1, 20),
    )
    with pytest.raises(dataclasses.FrozenInstanceError):
        log.score_percent = 100


def test_daily_plan_lists_not_shared():
    p1 = DailyPlan(id="p1", user_id="u1", plan_date=date(2024, 1, 5))
    p2 = DailyPlan(id="p2", user_id="u1", plan_date=date(2024, 1, 6))
    p1.topic_ids_selected.append("t1")
    assert p2.topic_ids_selected == []


def test_plan_stats_total():
    assert PlanStats(mandatory=1, new=2, early=3).total == 6


def test_user_settings_defaults():
    s = UserSettings(user_id="u1")
    assert s.cards_per_day == 3
    assert s.questions_per_topic == 10


def test_enum_values():
    assert TopicStatus.NEW.value == "new"
    assert PerformanceTier.HIGH == "high"
