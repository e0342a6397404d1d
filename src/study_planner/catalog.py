"""Subject and topic management."""
import logging
from typing import Optional

from study_planner.errors import InvalidInputError, SubjectNotFoundError, TopicNotFoundError
from study_planner.models import Subject, Topic
from study_planner.store import StudyStore

logger = logging.getLogger(__name__)


def parse_topic_titles(text: str) -> list[str]:
    """One topic per line; blank lines are ignored."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def _clean_name(name: str, what: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInputError(f"{what} cannot be empty")
    return name


def _owned_subject(store: StudyStore, user_id: str, subject_id: str) -> Subject:
    subject = store.get_subject(subject_id)
    if subject is None or subject.user_id != user_id:
        raise SubjectNotFoundError(subject_id)
    return subject


def _owned_topic(store: StudyStore, user_id: str, topic_id: str) -> Topic:
    topic = store.get_topic(topic_id)
    if topic is None or topic.user_id != user_id:
        raise TopicNotFoundError(topic_id)
    return topic


def create_subject(store: StudyStore, user_id: str, name: str, topics_text: str = "") -> tuple[Subject, list[Topic]]:
    subject = store.create_subject(user_id, _clean_name(name, "Subject name"))
    titles = parse_topic_titles(topics_text)
    topics = store.create_topics(user_id, subject.id, titles) if titles else []
    logger.info("Created subject %r with %d topics", subject.name, len(topics))
    return subject, topics


def add_topics(store: StudyStore, user_id: str, subject_id: str, topics_text: str) -> list[Topic]:
    _owned_subject(store, user_id, subject_id)
    titles = parse_topic_titles(topics_text)
    if not titles:
        raise InvalidInputError("No topic titles given")
    return store.create_topics(user_id, subject_id, titles)


def rename_subject(store: StudyStore, user_id: str, subject_id: str, name: str) -> Subject:
    _owned_subject(store, user_id, subject_id)
    return store.update_subject(subject_id, name=_clean_name(name, "Subject name"))


def archive_subject(store: StudyStore, user_id: str, subject_id: str) -> Subject:
    """Hide a subject from planning while keeping its topics and history."""
    _owned_subject(store, user_id, subject_id)
    logger.info("Archiving subject %s", subject_id)
    return store.update_subject(subject_id, is_active=False)


def restore_subject(store: StudyStore, user_id: str, subject_id: str) -> Subject:
    _owned_subject(store, user_id, subject_id)
    return store.update_subject(subject_id, is_active=True)


def delete_subject(store: StudyStore, user_id: str, subject_id: str, keep_history: bool = True) -> None:
    """Archive the subject, or with keep_history=False remove it with its topics and review logs."""
    if keep_history:
        archive_subject(store, user_id, subject_id)
        return
    _owned_subject(store, user_id, subject_id)
    logger.info("Deleting subject %s and its topics", subject_id)
    store.delete_subject(subject_id)


def delete_topic(store: StudyStore, user_id: str, topic_id: str) -> None:
    _owned_topic(store, user_id, topic_id)
    store.delete_topic(topic_id)


def update_topic_notes(store: StudyStore, user_id: str, topic_id: str, notes: str) -> Topic:
    _owned_topic(store, user_id, topic_id)
    return store.update_topic_notes(topic_id, notes)


def list_subjects(store: StudyStore, user_id: str, include_archived: bool = False) -> list[dict]:
    """Subjects with their topic counts."""
    return [
        {"subject": s, "topic_count": len(store.list_topics_by_subject(s.id))}
        for s in store.list_subjects(user_id, include_archived=include_archived)
    ]


def get_topic_with_subject(store: StudyStore, user_id: str, topic_id: str) -> tuple[Topic, Optional[Subject]]:
    topic = _owned_topic(store, user_id, topic_id)
    return topic, store.get_subject(topic.subject_id)
