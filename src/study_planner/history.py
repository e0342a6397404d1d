"""Past plans and review history."""
from study_planner.models import ReviewLog
from study_planner.store import StudyStore

REMOVED_TOPIC = "Removed topic"


def get_plan_history(store: StudyStore, user_id: str) -> list[dict]:
    """All plans newest first, with topic titles resolved for display."""
    topics = {t.id: t for t in store.list_topics(user_id)}
    subjects = {s.id: s for s in store.list_subjects(user_id, include_archived=True)}
    history = []
    for plan in store.list_plans(user_id):
        entries = []
        for topic_id in plan.topic_ids_selected:
            topic = topics.get(topic_id)
            subject = subjects.get(topic.subject_id) if topic else None
            entries.append({
                "topic_id": topic_id,
                "title": topic.title if topic else REMOVED_TOPIC,
                "subject_name": subject.name if subject else "",
                "completed": topic_id in plan.topic_ids_completed,
            })
        total = len(plan.topic_ids_selected)
        completed = len(plan.topic_ids_completed)
        history.append({
            "plan_id": plan.id,
            "plan_date": plan.plan_date,
            "total": total,
            "completed": completed,
            "completion_rate": round(completed / total * 100) if total else 0,
            "topics": entries,
        })
    return history


def get_topic_reviews(store: StudyStore, topic_id: str) -> list[ReviewLog]:
    return store.list_review_logs(topic_id)
