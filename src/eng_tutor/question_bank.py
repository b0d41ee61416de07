"""Placement test question bank."""
import json
import logging
from pathlib import Path

from eng_tutor.levels import CEFR_ORDER, SKILLS, is_level
from eng_tutor.models import TestQuestion

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_BANK_PATH = CONTENT_DIR / "level_test_questions.json"


class QuestionBank:
    """Immutable collection of placement questions indexed by level and skill."""

    def __init__(self, questions):
        questions = tuple(questions)
        by_id = {}
        for q in questions:
            if q.id in by_id:
                raise ValueError(f"Duplicate question id: {q.id}")
            if not is_level(q.level):
                raise ValueError(f"Question {q.id} has unknown level {q.level!r}")
            if q.type not in SKILLS:
                raise ValueError(f"Question {q.id} has unknown skill {q.type!r}")
            if not 0 <= q.correct_answer < len(q.options):
                raise ValueError(f"Question {q.id} correct answer is out of range")
            by_id[q.id] = q
        self._questions = questions
        self._by_id = by_id
        self._by_level = {
            level: tuple(q for q in questions if q.level == level) for level in CEFR_ORDER
        }

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self):
        return iter(self._questions)

    def __contains__(self, question_id) -> bool:
        return question_id in self._by_id

    def get(self, question_id: str) -> TestQuestion:
        return self._by_id[question_id]

    def for_level(self, level: str) -> tuple:
        return self._by_level.get(level, ())

    def for_skill(self, level: str, skill: str) -> tuple:
        return tuple(q for q in self.for_level(level) if q.type == skill)

    def count_by_level(self) -> dict:
        return {level: len(qs) for level, qs in self._by_level.items() if qs}


def load_question_bank(path=None) -> QuestionBank:
    """Load a question bank from a JSON file (defaults to the bundled bank)."""
    path = Path(path) if path else DEFAULT_BANK_PATH
    data = json.loads(path.read_text(encoding="utf-8"))
    bank = QuestionBank(TestQuestion.from_dict(q) for q in data["questions"])
    logger.info("Loaded %d placement questions from %s", len(bank), path.name)
    return bank
