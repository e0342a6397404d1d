# tests/test_classifier.py
from datetime import date

from conftest import make_topic
from study_planner.classifier import classify_topic
from study_planner.models import TopicStatus

TODAY = date(2024, 1, 5)


def test_never_reviewed_is_new():
    assert classify_topic(make_topic("a"), TODAY) is TopicStatus.NEW


def test_never_reviewed_with_past_due_date_is_still_new():
    topic = make_topic("a", next_="2024-01-01")
    assert classify_topic(topic, TODAY) is TopicStatus.NEW


def test_overdue_is_mandatory():
    topic = make_topic("b", last="2023-12-29", next_="2024-01-01")
    assert classify_topic(topic, TODAY) is TopicStatus.MANDATORY


def test_due_today_is_mandatory():
    topic = make_topic("b", last="2023-12-21", next_="2024-01-05")
    assert classify_topic(topic, TODAY) is TopicStatus.MANDATORY


def test_due_later_is_early():
    topic = make_topic("c", last="2024-01-04", next_="2024-01-06")
    assert classify_topic(topic, TODAY) is TopicStatus.EARLY


def test_reviewed_without_date_is_future():
    topic = make_topic("d", last="2024-01-01")
    assert classify_topic(topic, TODAY) is TopicStatus.FUTURE
