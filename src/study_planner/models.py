"""Data classes for the study planner domain model."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class TopicStatus(str, Enum):
    NEW = "new"
    MANDATORY = "mandatory"
    EARLY = "early"
    FUTURE = "future"


class PerformanceTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class Subject:
    id: str
    user_id: str
    name: str
    created_at: str = ""
    is_active: bool = True


@dataclass
class Topic:
    id: str
    user_id: str
    subject_id: str
    title: str
    notes: str = ""
    created_at: str = ""
    last_reviewed_at: Optional[date] = None
    next_review_at: Optional[date] = None
    total_reviews: int = 0
    last_score_percent: Optional[int] = None


@dataclass(frozen=True)
class ReviewLog:
    id: str
    user_id: str
    topic_id: str
    reviewed_at: date
    correct_answers: int
    score_percent: int
    next_review_at_computed: date
    review_note: str = ""


@dataclass
class DailyPlan:
    id: str
    user_id: str
    plan_date: date
    topic_ids_selected: list[str] = field(default_factory=list)
    topic_ids_completed: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


@dataclass
class UserSettings:
    user_id: str
    cards_per_day: int = 3
    questions_per_topic: int = 10  # fixed


@dataclass(frozen=True)
class ScheduleResult:
    next_review_at: date
    days_until_review: int
    performance_tier: PerformanceTier


@dataclass
class PlanStats:
    mandatory: int = 0
    new: int = 0
    early: int = 0

    @property
    def total(self) -> int:
        return self.mandatory + self.new + self.early


@dataclass
class PlanGenerationResult:
    plan: DailyPlan
    is_new: bool
    stats: PlanStats


@dataclass
class ReviewOutcome:
    schedule: ScheduleResult
    review_log: ReviewLog
    topic: Topic
    plan: DailyPlan
