import pytest
from unittest.mock import patch

from conftest import make_question
from eng_tutor.app import (
    SessionExitRequested, main, run_placement_test, run_review_session,
    session_int_prompt, session_prompt,
)
from eng_tutor.db import init_db, get_record
from eng_tutor.levels import SKILLS
from eng_tutor.profile import get_daily_goal
from eng_tutor.question_bank import QuestionBank
from eng_tutor.seed import seed_all
from eng_tutor.words import get_due_words


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("eng_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("eng_tutor.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("eng_tutor.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_session_int_prompt_raises_on_q():
    with patch("eng_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_int_prompt("rate", choices=["1", "2", "3", "4"])


def test_session_int_prompt_returns_normal_input():
    with patch("eng_tutor.app.Prompt.ask", return_value="3"):
        result = session_int_prompt("rate", choices=["1", "2", "3", "4"])
        assert result == 3


def test_run_review_session_exits_on_q(tmp_db):
    """User types 'q' on the second word's reveal prompt: first word saved, exit raised."""
    init_db(tmp_db)
    seed_all(tmp_db)
    words = get_due_words(tmp_db, limit=2)

    # Word 1: Enter to reveal, then rate 3 (good). Word 2: 'q' on reveal.
    with patch("eng_tutor.app.Prompt.ask", side_effect=["", "3", "q"]):
        with pytest.raises(SessionExitRequested):
            run_review_session(tmp_db, words)

    assert get_record(tmp_db, words[0].word_id).interval == 3
    assert get_record(tmp_db, words[1].word_id).last_reviewed_date is None


def test_run_review_session_maps_ratings(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    words = get_due_words(tmp_db, limit=2)

    with patch("eng_tutor.app.Prompt.ask", side_effect=["", "1", "", "4"]):
        reviewed = run_review_session(tmp_db, words)

    assert reviewed == 2
    again = get_record(tmp_db, words[0].word_id)
    easy = get_record(tmp_db, words[1].word_id)
    assert again.repetitions == 0
    assert again.ease_factor == 2.3
    assert easy.ease_factor == 2.65


def test_run_review_session_with_nothing_due(tmp_db):
    assert run_review_session(tmp_db, []) == 0


def test_run_placement_test_all_correct():
    bank = QuestionBank([
        make_question(f"{level}-{skill}-{i}", level, skill, correct=0)
        for level in ("A1", "A2", "B1", "B2")
        for skill in SKILLS
        for i in range(5)
    ])
    with patch("eng_tutor.app.Prompt.ask", return_value="1"):
        result = run_placement_test(bank)
    assert result.final_level == "B2"
    assert result.suggested_start_week == 25


def test_run_placement_test_stops_when_bank_runs_out():
    bank = QuestionBank([make_question("only", "A2", correct=0)])
    with patch("eng_tutor.app.Prompt.ask", return_value="1"):
        assert run_placement_test(bank) is None


def test_main_sets_goal_then_quits(tmp_db):
    with patch("eng_tutor.app.DEFAULT_DB_PATH", tmp_db), \
            patch("eng_tutor.app.Prompt.ask", side_effect=["goal", "quit"]), \
            patch("eng_tutor.app.IntPrompt.ask", return_value=35):
        main()
    assert get_daily_goal(tmp_db) == 35
