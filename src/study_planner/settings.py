"""Per-user settings and process configuration."""
import logging
import os

from study_planner.errors import InvalidInputError, validate_capacity
from study_planner.models import UserSettings
from study_planner.store import StudyStore

DEFAULT_CARDS_PER_DAY = 3
DEFAULT_USER_ID = "local"
USER_ENV = "STUDY_PLANNER_USER"
LOG_LEVEL_ENV = "STUDY_PLANNER_LOG_LEVEL"


def resolve_user_id() -> str:
    return os.environ.get(USER_ENV) or DEFAULT_USER_ID


def resolve_log_level() -> str:
    level = (os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    # Unknown names fall back rather than break logging setup.
    if not isinstance(logging.getLevelName(level), int):
        return "WARNING"
    return level


def get_settings(store: StudyStore, user_id: str) -> UserSettings:
    raw = store.get_setting(user_id, "cards_per_day", str(DEFAULT_CARDS_PER_DAY))
    try:
        cards_per_day = int(raw)
    except ValueError:
        cards_per_day = DEFAULT_CARDS_PER_DAY
    if cards_per_day < 1:
        cards_per_day = DEFAULT_CARDS_PER_DAY
    return UserSettings(user_id=user_id, cards_per_day=cards_per_day)


def update_settings(store: StudyStore, user_id: str, cards_per_day: int) -> UserSettings:
    try:
        validate_capacity(cards_per_day)
    except InvalidInputError:
        raise InvalidInputError(f"Cards per day must be at least 1, got {cards_per_day!r}") from None
    store.set_setting(user_id, "cards_per_day", str(cards_per_day))
    return get_settings(store, user_id)
