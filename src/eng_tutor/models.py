"""Data classes for the learning engine domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


@dataclass(frozen=True)
class TestQuestion:
    id: str
    type: str
    level: str
    question: str
    options: tuple
    correct_answer: int
    explanation: str = ""
    context: Optional[str] = None
    difficulty: Optional[int] = None

    __test__ = False

    @classmethod
    def from_dict(cls, data: dict) -> "TestQuestion":
        return cls(
            id=data["id"],
            type=data["type"],
            level=data["level"],
            question=data["question"],
            options=tuple(data["options"]),
            correct_answer=data["correctAnswer"],
            explanation=data.get("explanation", ""),
            context=data.get("context"),
            difficulty=data.get("difficulty"),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "level": self.level,
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }
        if self.context is not None:
            data["context"] = self.context
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        return data


@dataclass(frozen=True)
class AnswerRecord:
    question: TestQuestion
    answer_index: int
    correct: bool
    time_spent: float
    level_before: str
    level_after: str


@dataclass(frozen=True)
class SkillTally:
    correct: int = 0
    total: int = 0


@dataclass(frozen=True)
class SkillResult:
    accuracy: float
    estimated_level: str
    questions_attempted: int = 0
    questions_correct: int = 0


@dataclass(frozen=True)
class LevelScore:
    attempted: int = 0
    correct: int = 0
    accuracy: float = 0.0


@dataclass(frozen=True)
class LevelTestResult:
    final_level: str
    confidence: int
    duration: int
    skill_breakdown: dict
    recommendations: list
    suggested_start_week: int
    focus_skills: tuple = ()
    level_breakdown: dict = field(default_factory=dict)
    test_id: str = ""
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "testId": self.test_id,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "duration": self.duration,
            "finalLevel": self.final_level,
            "confidence": self.confidence,
            "skillBreakdown": {
                skill: {
                    "questionsAttempted": r.questions_attempted,
                    "questionsCorrect": r.questions_correct,
                    "accuracy": r.accuracy,
                    "estimatedLevel": r.estimated_level,
                }
                for skill, r in self.skill_breakdown.items()
            },
            "levelBreakdown": {
                level: {"attempted": s.attempted, "correct": s.correct, "accuracy": s.accuracy}
                for level, s in self.level_breakdown.items()
            },
            "focusSkills": list(self.focus_skills),
            "recommendations": list(self.recommendations),
            "suggestedStartWeek": self.suggested_start_week,
        }


def _parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO timestamp into a naive local datetime.

    Accepts the trailing ``Z`` written by JavaScript's ``toISOString()``.
    Aware values are converted to local time so they compare with ``now``.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, datetime):
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class SrsRecord:
    word_id: str
    interval: int
    repetitions: int
    ease_factor: float
    last_reviewed_date: Optional[datetime]
    next_review_date: datetime

    def to_dict(self) -> dict:
        return {
            "wordId": self.word_id,
            "interval": self.interval,
            "repetitions": self.repetitions,
            "easeFactor": self.ease_factor,
            "lastReviewedDate": self.last_reviewed_date.isoformat() if self.last_reviewed_date else None,
            "nextReviewDate": self.next_review_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict, now: Optional[datetime] = None) -> "SrsRecord":
        """Build a record from stored JSON, falling back to new-word defaults.

        Missing or unreadable fields never raise: the word is treated as
        never reviewed so that content catalogs can add words at any time.
        """
        now = now or datetime.now()
        try:
            interval = max(1, int(data.get("interval", 1)))
        except (TypeError, ValueError):
            interval = 1
        try:
            repetitions = max(0, int(data.get("repetitions", 0)))
        except (TypeError, ValueError):
            repetitions = 0
        try:
            ease_factor = max(MIN_EASE_FACTOR, float(data.get("easeFactor", DEFAULT_EASE_FACTOR)))
        except (TypeError, ValueError):
            ease_factor = DEFAULT_EASE_FACTOR
        last_reviewed = _parse_datetime(data.get("lastReviewedDate"))
        next_review = _parse_datetime(data.get("nextReviewDate"))
        if next_review is None:
            next_review = now
        return cls(
            word_id=str(data["wordId"]),
            interval=interval,
            repetitions=repetitions,
            ease_factor=ease_factor,
            last_reviewed_date=last_reviewed,
            next_review_date=next_review,
        )


@dataclass
class Word:
    word_id: str
    word: str
    meaning: str
    example: str = ""
    pronunciation: str = ""
