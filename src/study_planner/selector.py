"""Daily topic selection.

Priority order:
    1. Mandatory reviews (due or overdue), always included, encounter order
    2. New topics, preferring subjects not yet in today's selection
    3. Early reviews, soonest due first, same subject preference
No topic is selected twice and the selection never exceeds capacity.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from study_planner.classifier import classify_topic
from study_planner.models import PlanStats, Topic, TopicStatus


@dataclass
class Selection:
    topic_ids: list[str] = field(default_factory=list)
    stats: PlanStats = field(default_factory=PlanStats)


def _pick_diverse(pool: list[Topic], used_subject_ids: set[str]) -> Optional[Topic]:
    for topic in pool:
        if topic.subject_id not in used_subject_ids:
            return topic
    return pool[0] if pool else None


def select_plan(candidates: Sequence[Topic], capacity: int, target_date: date) -> Selection:
    """Select up to `capacity` topic ids for `target_date`.

    Candidates must already be restricted to active subjects. Capacity is
    validated by the caller.
    """
    mandatory: list[Topic] = []
    new: list[Topic] = []
    early: list[Topic] = []
    seen: set[str] = set()
    for topic in candidates:
        if topic.id in seen:
            continue
        seen.add(topic.id)
        status = classify_topic(topic, target_date)
        if status is TopicStatus.MANDATORY:
            mandatory.append(topic)
        elif status is TopicStatus.NEW:
            new.append(topic)
        elif status is TopicStatus.EARLY:
            early.append(topic)
    early.sort(key=lambda t: t.next_review_at)  # early topics always carry a date

    selection = Selection()
    used_subject_ids: set[str] = set()

    def take(topic: Topic) -> None:
        selection.topic_ids.append(topic.id)
        used_subject_ids.add(topic.subject_id)

    for topic in mandatory:
        if len(selection.topic_ids) >= capacity:
            break
        take(topic)
        selection.stats.mandatory += 1

    for pool, bucket in ((new, "new"), (early, "early")):
        while len(selection.topic_ids) < capacity and pool:
            topic = _pick_diverse(pool, used_subject_ids)
            pool.remove(topic)
            take(topic)
            setattr(selection.stats, bucket, getattr(selection.stats, bucket) + 1)

    return selection


def compute_plan_stats(topic_ids: Iterable[str], topics: Iterable[Topic], target_date: date) -> PlanStats:
    """Recount an existing selection against current topic state.

    Ids with no matching topic are skipped. Reviewed topics without a date
    count as early.
    """
    by_id = {t.id: t for t in topics}
    stats = PlanStats()
    for topic_id in topic_ids:
        topic = by_id.get(topic_id)
        if topic is None:
            continue
        status = classify_topic(topic, target_date)
        if status is TopicStatus.MANDATORY:
            stats.mandatory += 1
        elif status is TopicStatus.NEW:
            stats.new += 1
        else:
            stats.early += 1
    return stats
