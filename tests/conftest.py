from datetime import datetime

import pytest

from eng_tutor.levels import SKILLS
from eng_tutor.models import TestQuestion
from eng_tutor.question_bank import QuestionBank


def make_question(qid, level="A2", skill="vocabulary", correct=0):
    return TestQuestion(
        id=qid,
        type=skill,
        level=level,
        question=f"Question {qid}",
        options=("a", "b", "c", "d"),
        correct_answer=correct,
    )


def make_bank(per_skill=10, levels=("A1", "A2", "B1", "B2")):
    questions = [
        make_question(f"{level.lower()}-{skill[0]}{i}", level, skill, correct=i % 4)
        for level in levels
        for skill in SKILLS
        for i in range(per_skill)
    ]
    return QuestionBank(questions)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def bank():
    """40 questions per placement level, 10 per skill."""
    return make_bank()


@pytest.fixture
def now():
    return datetime(2025, 3, 10, 9, 30)


