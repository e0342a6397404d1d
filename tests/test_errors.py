# tests/test_errors.py
from datetime import date, datetime

import pytest

from study_planner.errors import (
    InvalidInputError, NotFoundError, PlannerError, TopicNotFoundError,
    parse_date, validate_capacity, validate_correct_answers,
)


def test_hierarchy():
    assert issubclass(InvalidInputError, PlannerError)
    assert issubclass(InvalidInputError, ValueError)
    assert issubclass(TopicNotFoundError, NotFoundError)
    assert TopicNotFoundError("t1").topic_id == "t1"


@pytest.mark.parametrize("value", [0, 7, 10])
def test_valid_correct_answers(value):
    assert validate_correct_answers(value) == value


@pytest.mark.parametrize("value", [-1, 11, 9.0, True, "9"])
def test_invalid_correct_answers(value):
    with pytest.raises(InvalidInputError):
        validate_correct_answers(value)


def test_validate_capacity():
    assert validate_capacity(1) == 1
    with pytest.raises(InvalidInputError):
        validate_capacity(0)


def test_parse_date():
    assert parse_date("2024-01-05") == date(2024, 1, 5)
    assert parse_date(date(2024, 1, 5)) == date(2024, 1, 5)
    assert parse_date(datetime(2024, 1, 5, 23, 59)) == date(2024, 1, 5)


@pytest.mark.parametrize("value", ["2024-13-01", "yesterday", "", None])
def test_parse_date_rejects_malformed(value):
    with pytest.raises(InvalidInputError):
        parse_date(value)
