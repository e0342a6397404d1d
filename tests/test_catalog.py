# tests/test_catalog.py
from datetime import date

import pytest

from conftest import USER
from study_planner.catalog import (
    add_topics, archive_subject, create_subject, delete_subject, delete_topic,
    get_topic_with_subject, list_subjects, parse_topic_titles, rename_subject,
    restore_subject, update_topic_notes,
)
from study_planner.errors import InvalidInputError, SubjectNotFoundError, TopicNotFoundError


def test_parse_topic_titles_skips_blank_lines():
    assert parse_topic_titles("  Fractions \n\n Algebra\n   \nGeometry") == [
        "Fractions", "Algebra", "Geometry",
    ]


def test_create_subject_with_topics(store):
    subject, topics = create_subject(store, USER, "  Math ", "Fractions\nAlgebra\n")
    assert subject.name == "Math"
    assert [t.title for t in topics] == ["Fractions", "Algebra"]
    assert all(t.total_reviews == 0 and t.last_reviewed_at is None for t in topics)


def test_create_subject_without_topics(store):
    subject, topics = create_subject(store, USER, "Math")
    assert topics == []
    assert store.get_subject(subject.id) is not None


def test_create_subject_empty_name(store):
    with pytest.raises(InvalidInputError):
        create_subject(store, USER, "   ")


def test_add_topics(store):
    subject, _ = create_subject(store, USER, "Math")
    topics = add_topics(store, USER, subject.id, "Limits")
    assert [t.title for t in store.list_topics_by_subject(subject.id)] == ["Limits"]
    assert topics[0].subject_id == subject.id


def test_add_topics_requires_titles(store):
    subject, _ = create_subject(store, USER, "Math")
    with pytest.raises(InvalidInputError):
        add_topics(store, USER, subject.id, "\n\n")


def test_other_users_subject_not_visible(store):
    subject, _ = create_subject(store, "other", "Art")
    with pytest.raises(SubjectNotFoundError):
        add_topics(store, USER, subject.id, "Color")
    with pytest.raises(SubjectNotFoundError):
        archive_subject(store, USER, subject.id)


def test_rename_subject(store):
    subject, _ = create_subject(store, USER, "Math")
    assert rename_subject(store, USER, subject.id, "Mathematics").name == "Mathematics"


def test_archive_and_restore(store):
    subject, topics = create_subject(store, USER, "Math", "A")
    archive_subject(store, USER, subject.id)
    assert store.list_active_subjects(USER) == []
    assert store.get_topic(topics[0].id) is not None
    restore_subject(store, USER, subject.id)
    assert len(store.list_active_subjects(USER)) == 1


def test_delete_subject_keeps_history_by_default(store):
    subject, topics = create_subject(store, USER, "Math", "A")
    delete_subject(store, USER, subject.id)
    assert store.get_subject(subject.id).is_active is False
    assert store.get_topic(topics[0].id) is not None


def test_hard_delete_subject(store):
    subject, topics = create_subject(store, USER, "Math", "A")
    store.append_review_log(USER, topics[0].id, 7, 70, date(2024, 1, 15), "", date(2024, 1, 5))
    delete_subject(store, USER, subject.id, keep_history=False)
    assert store.get_subject(subject.id) is None
    assert store.get_topic(topics[0].id) is None
    assert store.list_review_logs(topics[0].id) == []


def test_delete_topic(store):
    _, topics = create_subject(store, USER, "Math", "A\nB")
    delete_topic(store, USER, topics[0].id)
    assert [t.title for t in store.list_topics(USER)] == ["B"]


def test_update_topic_notes(store):
    _, topics = create_subject(store, USER, "Math", "A")
    topic = update_topic_notes(store, USER, topics[0].id, "remember the chain rule")
    assert topic.notes == "remember the chain rule"


def test_update_notes_missing_topic(store):
    with pytest.raises(TopicNotFoundError):
        update_topic_notes(store, USER, "missing", "x")


def test_list_subjects_with_counts(store):
    math, _ = create_subject(store, USER, "Math", "A\nB")
    bio, _ = create_subject(store, USER, "Bio", "C")
    archive_subject(store, USER, bio.id)
    active = list_subjects(store, USER)
    assert [(e["subject"].name, e["topic_count"]) for e in active] == [("Math", 2)]
    everything = list_subjects(store, USER, include_archived=True)
    assert len(everything) == 2


def test_get_topic_with_subject(store):
    subject, topics = create_subject(store, USER, "Math", "A")
    topic, owner = get_topic_with_subject(store, USER, topics[0].id)
    assert topic.title == "A"
    assert owner.id == subject.id
