"""Planner exceptions and boundary validation."""
from datetime import date, datetime

QUESTIONS_PER_TOPIC = 10


class PlannerError(Exception):
    """Base class for all study planner errors."""


class InvalidInputError(PlannerError, ValueError):
    pass


class NotFoundError(PlannerError, LookupError):
    pass


class TopicNotFoundError(NotFoundError):
    def __init__(self, topic_id: str):
        super().__init__(f"Topic not found: {topic_id}")
        self.topic_id = topic_id


class SubjectNotFoundError(NotFoundError):
    def __init__(self, subject_id: str):
        super().__init__(f"Subject not found: {subject_id}")
        self.subject_id = subject_id


class PlanNotFoundError(NotFoundError):
    pass


class DuplicatePlanError(PlannerError):
    """A plan already exists for this (user, date); re-fetch it."""

    def __init__(self, user_id: str, plan_date: date):
        super().__init__(f"Plan already exists for {user_id} on {plan_date.isoformat()}")
        self.user_id = user_id
        self.plan_date = plan_date


def validate_correct_answers(correct_answers: int) -> int:
    if isinstance(correct_answers, bool) or not isinstance(correct_answers, int):
        raise InvalidInputError(f"Correct answers must be an integer, got {correct_answers!r}")
    if not 0 <= correct_answers <= QUESTIONS_PER_TOPIC:
        raise InvalidInputError(
            f"Correct answers must be between 0 and {QUESTIONS_PER_TOPIC}, got {correct_answers}"
        )
    return correct_answers


def validate_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise InvalidInputError(f"Capacity must be a positive integer, got {capacity!r}")
    return capacity


def parse_date(value) -> date:
    """Accept a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from e
