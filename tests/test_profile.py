import pytest

from eng_tutor.db import init_db
from eng_tutor.placement import create_session, get_result, get_next_question, submit_answer
from eng_tutor.profile import (
    get_current_level, get_daily_goal, get_last_level_test_result, get_setting,
    save_level_test_result, set_current_level, set_daily_goal, set_setting,
)


def test_settings_roundtrip(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "theme") is None
    assert get_setting(tmp_db, "theme", "dark") == "dark"
    set_setting(tmp_db, "theme", "light")
    set_setting(tmp_db, "theme", "blue")
    assert get_setting(tmp_db, "theme") == "blue"


def test_current_level(tmp_db):
    init_db(tmp_db)
    assert get_current_level(tmp_db) is None
    set_current_level(tmp_db, "B1")
    assert get_current_level(tmp_db) == "B1"
    with pytest.raises(ValueError):
        set_current_level(tmp_db, "C2")


def test_daily_goal_default_and_clamp(tmp_db):
    init_db(tmp_db)
    assert get_daily_goal(tmp_db) == 20
    assert set_daily_goal(tmp_db, 35) == 35
    assert get_daily_goal(tmp_db) == 35
    assert set_daily_goal(tmp_db, 0) == 1
    assert set_daily_goal(tmp_db, 500) == 100
    assert get_daily_goal(tmp_db) == 100


def test_save_level_test_result(tmp_db, bank, now):
    init_db(tmp_db)
    state = create_session(bank, "B1", now=now)
    while not state.complete:
        question = get_next_question(state)
        state, _ = submit_answer(state, question, question.correct_answer, 3.0)
    result = get_result(state, now=now)

    save_level_test_result(tmp_db, result)
    assert get_current_level(tmp_db) == "B2"
    stored = get_last_level_test_result(tmp_db)
    assert stored["finalLevel"] == "B2"
    assert stored["completedAt"] == "2025-03-10T09:30:00"
    assert stored["suggestedStartWeek"] == 25
    assert set(stored["skillBreakdown"]) == {"vocabulary", "grammar", "listening", "reading"}


def test_no_saved_result(tmp_db):
    init_db(tmp_db)
    assert get_last_level_test_result(tmp_db) is None
