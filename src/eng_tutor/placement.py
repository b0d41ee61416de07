"""Adaptive CEFR placement test.

The test is an immutable ``TestState`` plus pure transitions: every call to
``submit_answer`` returns a new state and leaves the old one untouched, so a
session can be replayed, serialized with ``state_to_dict`` or simply dropped
when the learner cancels.

Difficulty adapts on answer streaks. Two correct answers in a row move the
learner up one level, two misses in a row move them down one, always inside
A1-B2. The test stops after at least 15 questions once the level has held
for the last 4 answers, and never runs past 30.
"""
import logging
import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Optional

from eng_tutor.errors import EmptyBankError, TestCompleteError, TestNotCompleteError
from eng_tutor.levels import (
    PLACEMENT_LEVELS, SKILLS, demote, level_distance, level_index, promote, shift,
)
from eng_tutor.models import AnswerRecord, LevelScore, LevelTestResult, SkillResult, SkillTally
from eng_tutor.question_bank import QuestionBank

logger = logging.getLogger(__name__)

STABLE_RUN_CAP = 6
TARGET_ACCURACY = (0.5, 0.7)
UNSTABLE_CAP_PENALTY = 15

SKILL_RECOMMENDATIONS = {
    "vocabulary": "어휘 영역을 집중적으로 학습하세요.",
    "grammar": "문법 영역을 집중적으로 학습하세요.",
    "listening": "듣기 영역을 집중적으로 학습하세요.",
    "reading": "읽기 영역을 집중적으로 학습하세요.",
}

LEVEL_RECOMMENDATIONS = {
    "A1": ["기초 어휘와 간단한 문장 구조부터 시작하세요.", "매일 짧은 시간이라도 꾸준히 학습하세요."],
    "A2": ["일상 대화 표현을 많이 연습하세요.", "듣기와 말하기 연습을 병행하세요."],
    "B1": ["다양한 주제의 글을 읽어보세요.", "복잡한 문장 구조를 연습하세요."],
    "B2": ["뉴스나 기사를 영어로 읽어보세요.", "영어로 의견을 표현하는 연습을 하세요."],
}


@dataclass(frozen=True)
class PlacementConfig:
    min_questions: int = 15
    max_questions: int = 30
    stability_window: int = 4
    streak_to_adjust: int = 2
    weeks_per_level: int = 8
    initial_level: str = "A2"


def _empty_tallies() -> dict:
    return {skill: SkillTally() for skill in SKILLS}


@dataclass(frozen=True)
class TestState:
    test_id: str
    started_at: datetime
    current_level: str
    answered: tuple = ()
    skill_tallies: dict = field(default_factory=_empty_tallies)
    consecutive_correct: int = 0
    consecutive_wrong: int = 0
    complete: bool = False
    config: PlacementConfig = field(default_factory=PlacementConfig)
    bank: Optional[QuestionBank] = field(default=None, repr=False, compare=False)

    __test__ = False


@dataclass(frozen=True)
class SubmitOutcome:
    correct: bool
    should_continue: bool


def create_session(
    bank: QuestionBank,
    initial_level: Optional[str] = None,
    config: Optional[PlacementConfig] = None,
    now: Optional[datetime] = None,
) -> TestState:
    config = config or PlacementConfig()
    level = initial_level or config.initial_level
    if level not in PLACEMENT_LEVELS:
        raise ValueError(f"Initial level must be one of {', '.join(PLACEMENT_LEVELS)}, got {level!r}")
    state = TestState(
        test_id=f"test-{uuid.uuid4().hex[:12]}",
        started_at=now or datetime.now(),
        current_level=level,
        config=config,
        bank=bank,
    )
    logger.info("Placement test %s started at %s", state.test_id, level)
    return state


# --- Question selection ---


def _asked_ids(state: TestState) -> set:
    return {a.question.id for a in state.answered}


def _skills_by_need(state: TestState) -> list:
    """Skills ordered least-asked first, ties in skill order."""
    return sorted(
        SKILLS,
        key=lambda s: (state.skill_tallies.get(s, SkillTally()).total, SKILLS.index(s)),
    )


def _select_level(state: TestState, asked: set) -> str:
    def has_unasked(level):
        return any(q.id not in asked for q in state.bank.for_level(level))

    current = state.current_level
    if has_unasked(current):
        return current

    candidates = [lvl for lvl in PLACEMENT_LEVELS if lvl != current and has_unasked(lvl)]
    if not candidates:
        raise EmptyBankError(
            f"No unasked questions left at any level ({len(asked)} questions asked)"
        )

    cur_idx = level_index(current)
    previous = state.answered[-1].question.level if state.answered else current
    # Lean toward the difficulty the learner saw last; harder when there is no lean.
    preferred_side = -1 if level_index(previous) < cur_idx else 1

    def preference(level):
        side = 1 if level_index(level) > cur_idx else -1
        return (level_distance(level, current), 0 if side == preferred_side else 1)

    chosen = min(candidates, key=preference)
    logger.debug("No questions left at %s, falling back to %s", current, chosen)
    return chosen


def get_next_question(state: TestState, rng=None):
    """Pick the next unasked question for the session.

    Stays at the current level when it can and rotates through skills so that
    each skill is covered by the time the test ends. Pass a seeded
    ``random.Random`` as ``rng`` to vary the pick within a skill; without one
    the bank order decides.
    """
    if state.complete:
        raise TestCompleteError("The placement test is already complete")
    if state.bank is None:
        raise EmptyBankError("Session has no question bank")

    asked = _asked_ids(state)
    level = _select_level(state, asked)
    available = [q for q in state.bank.for_level(level) if q.id not in asked]

    for skill in _skills_by_need(state):
        candidates = [q for q in available if q.type == skill]
        if candidates:
            return rng.choice(candidates) if rng is not None else candidates[0]
    # Unreachable with a validated bank: every question has a known skill.
    raise EmptyBankError(f"No selectable question at {level}")


# --- Answer processing ---


def _is_stable(answered: tuple, window: int) -> bool:
    if len(answered) < window:
        return False
    return all(a.level_before == a.level_after for a in answered[-window:])


def _stable_run(answered: tuple) -> int:
    run = 0
    for answer in reversed(answered):
        if answer.level_before != answer.level_after:
            break
        run += 1
    return run


def _should_end(answered: tuple, config: PlacementConfig) -> bool:
    count = len(answered)
    if count >= config.max_questions:
        return True
    if count < config.min_questions:
        return False
    return _is_stable(answered, config.stability_window)


def submit_answer(state: TestState, question, answer_index: int, time_spent: float):
    """Record an answer and return ``(new_state, SubmitOutcome)``.

    An ``answer_index`` that matches no option (``-1`` on timeout) counts as
    a wrong answer.
    """
    if state.complete:
        raise TestCompleteError("The placement test is already complete")

    correct = answer_index == question.correct_answer
    config = state.config

    tallies = dict(state.skill_tallies)
    tally = tallies.get(question.type, SkillTally())
    tallies[question.type] = SkillTally(
        correct=tally.correct + (1 if correct else 0),
        total=tally.total + 1,
    )

    if correct:
        streak_correct, streak_wrong = state.consecutive_correct + 1, 0
    else:
        streak_correct, streak_wrong = 0, state.consecutive_wrong + 1

    level = state.current_level
    new_level = level
    if streak_correct >= config.streak_to_adjust:
        new_level = promote(level)
        streak_correct = 0
    elif streak_wrong >= config.streak_to_adjust:
        new_level = demote(level)
        streak_wrong = 0
    if new_level != level:
        logger.debug("Level %s -> %s after question %s", level, new_level, question.id)

    answered = state.answered + (
        AnswerRecord(
            question=question,
            answer_index=answer_index,
            correct=correct,
            time_spent=time_spent,
            level_before=level,
            level_after=new_level,
        ),
    )
    complete = _should_end(answered, config)
    if complete:
        logger.info(
            "Placement test %s finished at %s after %d questions",
            state.test_id, new_level, len(answered),
        )

    new_state = replace(
        state,
        current_level=new_level,
        answered=answered,
        skill_tallies=tallies,
        consecutive_correct=streak_correct,
        consecutive_wrong=streak_wrong,
        complete=complete,
    )
    return new_state, SubmitOutcome(correct=correct, should_continue=not complete)


# --- Results ---


def _level_for_accuracy(final_level: str, accuracy: float) -> str:
    if accuracy < 40:
        return shift(final_level, -1)
    if accuracy > 80:
        return shift(final_level, 1)
    return final_level


def _skill_breakdown(state: TestState) -> dict:
    breakdown = {}
    for skill in SKILLS:
        tally = state.skill_tallies.get(skill, SkillTally())
        if tally.total == 0:
            breakdown[skill] = SkillResult(accuracy=0.0, estimated_level=state.current_level)
            continue
        accuracy = round(tally.correct / tally.total * 100, 1)
        breakdown[skill] = SkillResult(
            accuracy=accuracy,
            estimated_level=_level_for_accuracy(state.current_level, accuracy),
            questions_attempted=tally.total,
            questions_correct=tally.correct,
        )
    return breakdown


def _weak_skills(breakdown: dict) -> tuple:
    """Weakest tested skill, plus the runner-up when it is also below 60%."""
    ranked = sorted(
        (s for s in SKILLS if breakdown[s].questions_attempted > 0),
        key=lambda s: (breakdown[s].accuracy, SKILLS.index(s)),
    )
    if not ranked:
        return ()
    focus = [ranked[0]]
    if len(ranked) > 1 and breakdown[ranked[1]].accuracy < 60:
        focus.append(ranked[1])
    return tuple(focus)


def _level_breakdown(state: TestState) -> dict:
    scores = {}
    for level in PLACEMENT_LEVELS:
        at_level = [a for a in state.answered if a.question.level == level]
        correct = sum(1 for a in at_level if a.correct)
        accuracy = round(correct / len(at_level) * 100, 1) if at_level else 0.0
        scores[level] = LevelScore(attempted=len(at_level), correct=correct, accuracy=accuracy)
    return scores


def _fit_score(state: TestState) -> float:
    final = state.current_level
    at_final = [a for a in state.answered if a.question.level == final]
    if not at_final:
        return 0.0
    accuracy = sum(1 for a in at_final if a.correct) / len(at_final)
    low, high = TARGET_ACCURACY
    # Pinned at an end of the scale: there is no level to move to.
    if (final == PLACEMENT_LEVELS[-1] and accuracy > high) or (final == PLACEMENT_LEVELS[0] and accuracy < low):
        return 20.0
    if low <= accuracy <= high:
        return 20.0
    gap = low - accuracy if accuracy < low else accuracy - high
    return max(0.0, 20.0 * (1 - gap / 0.3))


def _confidence(state: TestState) -> int:
    config = state.config
    count = len(state.answered)
    volume = min(count / config.max_questions, 1.0) * 30
    steady = min(_stable_run(state.answered), STABLE_RUN_CAP) / STABLE_RUN_CAP * 50
    score = volume + steady + _fit_score(state)
    if count >= config.max_questions and not _is_stable(state.answered, config.stability_window):
        score -= UNSTABLE_CAP_PENALTY
    return int(max(0, min(100, round(score))))


def suggested_start_week(level: str, weeks_per_level: int = PlacementConfig.weeks_per_level) -> int:
    """First curriculum week of a level."""
    return level_index(level) * weeks_per_level + 1


def get_result(state: TestState, now: Optional[datetime] = None) -> LevelTestResult:
    if not state.complete:
        raise TestNotCompleteError(
            f"Placement test is still running ({len(state.answered)} questions answered)"
        )
    final_level = state.current_level
    breakdown = _skill_breakdown(state)
    focus = _weak_skills(breakdown)
    recommendations = [SKILL_RECOMMENDATIONS[s] for s in focus]
    recommendations.extend(LEVEL_RECOMMENDATIONS[final_level])

    return LevelTestResult(
        final_level=final_level,
        confidence=_confidence(state),
        duration=int(round(sum(a.time_spent for a in state.answered))),
        skill_breakdown=breakdown,
        recommendations=recommendations,
        suggested_start_week=suggested_start_week(final_level, state.config.weeks_per_level),
        focus_skills=focus,
        level_breakdown=_level_breakdown(state),
        test_id=state.test_id,
        completed_at=now or datetime.now(),
    )


def get_progress(state: TestState) -> dict:
    current = len(state.answered)
    maximum = state.config.max_questions
    return {"current": current, "max": maximum, "percentage": round(current / maximum * 100)}


def get_current_accuracy(state: TestState) -> int:
    if not state.answered:
        return 0
    correct = sum(1 for a in state.answered if a.correct)
    return round(correct / len(state.answered) * 100)


# --- Serialization ---


def state_to_dict(state: TestState) -> dict:
    return {
        "testId": state.test_id,
        "startedAt": state.started_at.isoformat(),
        "currentLevel": state.current_level,
        "answers": [
            {
                "questionId": a.question.id,
                "answerIndex": a.answer_index,
                "correct": a.correct,
                "timeSpent": a.time_spent,
                "levelBefore": a.level_before,
                "levelAfter": a.level_after,
            }
            for a in state.answered
        ],
        "skillTallies": {
            skill: {"correct": t.correct, "total": t.total}
            for skill, t in state.skill_tallies.items()
        },
        "consecutiveCorrect": state.consecutive_correct,
        "consecutiveWrong": state.consecutive_wrong,
        "complete": state.complete,
        "config": asdict(state.config),
    }


def state_from_dict(data: dict, bank: QuestionBank) -> TestState:
    """Rebuild a saved session. Answered questions are looked up in bank."""
    answered = tuple(
        AnswerRecord(
            question=bank.get(a["questionId"]),
            answer_index=a["answerIndex"],
            correct=a["correct"],
            time_spent=a["timeSpent"],
            level_before=a["levelBefore"],
            level_after=a["levelAfter"],
        )
        for a in data.get("answers", [])
    )
    tallies = _empty_tallies()
    for skill, t in data.get("skillTallies", {}).items():
        tallies[skill] = SkillTally(correct=t["correct"], total=t["total"])
    return TestState(
        test_id=data["testId"],
        started_at=datetime.fromisoformat(data["startedAt"]),
        current_level=data["currentLevel"],
        answered=answered,
        skill_tallies=tallies,
        consecutive_correct=data.get("consecutiveCorrect", 0),
        consecutive_wrong=data.get("consecutiveWrong", 0),
        complete=data.get("complete", False),
        config=PlacementConfig(**data.get("config", {})),
        bank=bank,
    )
