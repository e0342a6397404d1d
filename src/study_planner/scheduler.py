"""Fixed-interval spaced repetition rule (3/10/15 days).

A review is a 10-question quiz:
    score < 70%   (0-6 correct)  -> review again in 3 days
    score 70-79%  (7 correct)    -> review again in 10 days
    score >= 80%  (8-10 correct) -> review again in 15 days
"""
from datetime import date, timedelta
from typing import Optional

from study_planner.errors import QUESTIONS_PER_TOPIC
from study_planner.models import PerformanceTier, ScheduleResult

LOW_DAYS = 3
MEDIUM_DAYS = 10
HIGH_DAYS = 15


def score_percent(correct_answers: int) -> int:
    return round(correct_answers / QUESTIONS_PER_TOPIC * 100)


def get_performance_tier(correct_answers: int) -> PerformanceTier:
    score = score_percent(correct_answers)
    if score < 70:
        return PerformanceTier.LOW
    elif score < 80:
        return PerformanceTier.MEDIUM
    return PerformanceTier.HIGH


def calculate_next_review(correct_answers: int, base_date: date) -> ScheduleResult:
    """Calculate the next review date for a quiz result.

    Args:
        correct_answers: Correct answers out of 10. Callers validate the range.
        base_date: Calendar day the review happened on.

    Returns:
        ScheduleResult with next_review_at, days_until_review and performance_tier.
    """
    tier = get_performance_tier(correct_answers)
    days = {
        PerformanceTier.LOW: LOW_DAYS,
        PerformanceTier.MEDIUM: MEDIUM_DAYS,
        PerformanceTier.HIGH: HIGH_DAYS,
    }[tier]
    return ScheduleResult(
        next_review_at=base_date + timedelta(days=days),
        days_until_review=days,
        performance_tier=tier,
    )


def get_performance_label(correct_answers: int) -> str:
    score = score_percent(correct_answers)
    if score < 70:
        return "Needs work"
    elif score < 80:
        return "Good"
    elif score < 100:
        return "Great"
    return "Excellent!"


def get_performance_color(correct_answers: int) -> str:
    tier = get_performance_tier(correct_answers)
    if tier is PerformanceTier.LOW:
        return "red"
    elif tier is PerformanceTier.MEDIUM:
        return "yellow"
    return "green"


def get_days_until_review(next_review_at: Optional[date], today: date) -> Optional[int]:
    """Whole days from today to the review date; negative when overdue."""
    if next_review_at is None:
        return None
    return (next_review_at - today).days


def is_review_due(next_review_at: Optional[date], target_date: date) -> bool:
    if next_review_at is None:
        return False
    return next_review_at <= target_date


def is_new_topic(last_reviewed_at: Optional[date]) -> bool:
    return last_reviewed_at is None
