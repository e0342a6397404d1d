"""Daily plan generation and review completion.

Plans are read-if-exists-else-create per (user, date): generating twice for
the same day returns the first plan untouched. Completing a topic logs the
review, reschedules the topic and marks it done in the plan in one store
transaction. Un-completing only clears the mark; the topic keeps its new
schedule.
"""
import logging
from datetime import date

from study_planner.errors import (
    DuplicatePlanError, InvalidInputError, PlanNotFoundError, TopicNotFoundError,
    parse_date, validate_capacity, validate_correct_answers,
)
from study_planner.models import DailyPlan, PlanGenerationResult, PlanStats, ReviewOutcome
from study_planner.scheduler import calculate_next_review, score_percent
from study_planner.selector import compute_plan_stats, select_plan
from study_planner.store import StudyStore

logger = logging.getLogger(__name__)


def _available_topics(store: StudyStore, user_id: str):
    active_subject_ids = {s.id for s in store.list_active_subjects(user_id)}
    return [t for t in store.list_topics(user_id) if t.subject_id in active_subject_ids]


def _existing_result(store: StudyStore, plan: DailyPlan, target_date: date) -> PlanGenerationResult:
    stats = compute_plan_stats(plan.topic_ids_selected, store.list_topics(plan.user_id), target_date)
    return PlanGenerationResult(plan=plan, is_new=False, stats=stats)


def generate_daily_plan(store: StudyStore, user_id: str, target_date, capacity: int) -> PlanGenerationResult:
    target_date = parse_date(target_date)
    validate_capacity(capacity)

    existing = store.get_plan(user_id, target_date)
    if existing is not None:
        logger.debug("Plan for %s on %s already exists", user_id, target_date)
        return _existing_result(store, existing, target_date)

    topics = _available_topics(store, user_id)
    if topics:
        selection = select_plan(topics, capacity, target_date)
        topic_ids, stats = selection.topic_ids, selection.stats
    else:
        topic_ids, stats = [], PlanStats()

    try:
        plan = store.create_plan(user_id, target_date, topic_ids)
    except DuplicatePlanError:
        # Another request created it between our read and write.
        logger.warning("Concurrent plan creation for %s on %s, re-fetching", user_id, target_date)
        existing = store.get_plan(user_id, target_date)
        if existing is None:
            raise
        return _existing_result(store, existing, target_date)

    logger.info(
        "Generated plan for %s on %s: %d mandatory, %d new, %d early",
        user_id, target_date, stats.mandatory, stats.new, stats.early,
    )
    return PlanGenerationResult(plan=plan, is_new=True, stats=stats)


def get_plan(store: StudyStore, user_id: str, plan_date) -> DailyPlan:
    plan_date = parse_date(plan_date)
    plan = store.get_plan(user_id, plan_date)
    if plan is None:
        raise PlanNotFoundError(f"No plan for {user_id} on {plan_date.isoformat()}")
    return plan


def complete_topic_review(store: StudyStore, user_id: str, plan_date, topic_id: str,
                          correct_answers: int, note: str = "") -> ReviewOutcome:
    """Record a finished quiz for a topic in the plan of `plan_date`.

    The next review is scheduled from `plan_date`, not from the wall clock.
    """
    validate_correct_answers(correct_answers)
    plan = get_plan(store, user_id, plan_date)
    if topic_id not in plan.topic_ids_selected:
        raise InvalidInputError(f"Topic {topic_id} is not in the plan for {plan.plan_date.isoformat()}")
    topic = store.get_topic(topic_id)
    if topic is None or topic.user_id != user_id:
        raise TopicNotFoundError(topic_id)

    schedule = calculate_next_review(correct_answers, plan.plan_date)
    log, topic, plan = store.record_review(
        user_id=user_id,
        topic_id=topic_id,
        plan_id=plan.id,
        correct_answers=correct_answers,
        score_percent=score_percent(correct_answers),
        reviewed_at=plan.plan_date,
        next_review_at=schedule.next_review_at,
        note=note,
    )
    logger.info(
        "Reviewed %s: %d/10, next review %s (%s)",
        topic_id, correct_answers, schedule.next_review_at, schedule.performance_tier.value,
    )
    return ReviewOutcome(schedule=schedule, review_log=log, topic=topic, plan=plan)


def uncomplete_topic(store: StudyStore, user_id: str, plan_date, topic_id: str) -> DailyPlan:
    # TODO: decide whether un-completing should roll back the topic's schedule
    # using its latest review log; for now the advanced schedule is kept.
    plan = get_plan(store, user_id, plan_date)
    return store.remove_completed(plan.id, topic_id)


def update_plan_topics(store: StudyStore, user_id: str, plan_date, topic_ids: list[str]) -> DailyPlan:
    """Replace the plan's selection, keeping order and dropping duplicates."""
    plan = get_plan(store, user_id, plan_date)
    known = {t.id for t in store.list_topics(user_id)}
    deduped: list[str] = []
    for topic_id in topic_ids:
        if topic_id not in known:
            raise TopicNotFoundError(topic_id)
        if topic_id not in deduped:
            deduped.append(topic_id)
    return store.set_plan_topics(plan.id, deduped)
