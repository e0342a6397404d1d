"""Scheduling state of a topic relative to a target day."""
from datetime import date

from study_planner.models import Topic, TopicStatus
from study_planner.scheduler import is_new_topic, is_review_due


def classify_topic(topic: Topic, target_date: date) -> TopicStatus:
    # Never-reviewed wins over any due date that happens to be set.
    if is_new_topic(topic.last_reviewed_at):
        return TopicStatus.NEW
    if is_review_due(topic.next_review_at, target_date):
        return TopicStatus.MANDATORY
    if topic.next_review_at is not None:
        return TopicStatus.EARLY
    return TopicStatus.FUTURE
