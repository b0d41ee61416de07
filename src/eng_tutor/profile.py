"""Learner profile settings: current level, daily goal and placement results."""
import json

from eng_tutor.db import get_connection
from eng_tutor.levels import PLACEMENT_LEVELS
from eng_tutor.models import LevelTestResult

DEFAULT_DAILY_GOAL = 20
MIN_DAILY_GOAL = 1
MAX_DAILY_GOAL = 100


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_current_level(db_path: str) -> str | None:
    return get_setting(db_path, "current_level")


def set_current_level(db_path: str, level: str) -> None:
    if level not in PLACEMENT_LEVELS:
        raise ValueError(f"Unknown level: {level!r}")
    set_setting(db_path, "current_level", level)


def get_daily_goal(db_path: str) -> int:
    return int(get_setting(db_path, "daily_goal", str(DEFAULT_DAILY_GOAL)))


def set_daily_goal(db_path: str, goal: int) -> int:
    """Store the daily review goal, clamped to 1-100. Returns the stored value."""
    goal = max(MIN_DAILY_GOAL, min(MAX_DAILY_GOAL, int(goal)))
    set_setting(db_path, "daily_goal", str(goal))
    return goal


def save_level_test_result(db_path: str, result: LevelTestResult) -> None:
    """Persist a placement result and adopt its level as the learner's level."""
    set_setting(db_path, "last_level_test", json.dumps(result.to_dict(), ensure_ascii=False))
    set_current_level(db_path, result.final_level)


def get_last_level_test_result(db_path: str) -> dict | None:
    raw = get_setting(db_path, "last_level_test")
    return json.loads(raw) if raw else None
