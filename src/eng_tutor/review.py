"""Review queue building from SRS records."""
from datetime import datetime

from eng_tutor.models import SrsRecord

MASTERED_INTERVAL = 21


def is_due(record: SrsRecord, now: datetime) -> bool:
    return record.next_review_date <= now


def get_overdue_days(record: SrsRecord, now: datetime) -> int:
    """Whole days past the due date; 0 when not yet overdue."""
    return max(0, (now - record.next_review_date).days)


def _priority(record: SrsRecord) -> tuple:
    # Most overdue first, then the words with the lowest ease.
    return (record.next_review_date, record.ease_factor, record.word_id)


def get_words_for_review(records, now: datetime, limit: int) -> list[SrsRecord]:
    """Due records, most overdue first, truncated to limit."""
    if limit <= 0:
        return []
    due = [r for r in records if is_due(r, now)]
    due.sort(key=_priority)
    return due[:limit]


def get_due_count(records, now: datetime) -> int:
    return sum(1 for r in records if is_due(r, now))


def get_overdue_records(records, now: datetime) -> list[SrsRecord]:
    return sorted((r for r in records if get_overdue_days(r, now) > 0), key=_priority)


def get_mastered(records, threshold: int = MASTERED_INTERVAL) -> list[SrsRecord]:
    """Records whose interval has grown to at least threshold days."""
    return [r for r in records if r.interval >= threshold]


def get_today_progress(records, now: datetime, daily_goal: int) -> dict:
    """Words reviewed on now's calendar day against the daily goal."""
    today = now.date()
    done = sum(
        1 for r in records
        if r.last_reviewed_date is not None and r.last_reviewed_date.date() == today
    )
    return {"done": done, "goal": daily_goal}
