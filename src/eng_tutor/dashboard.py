"""Review statistics and display helpers for the dashboard."""
from datetime import datetime

from eng_tutor.db import get_all_records, get_connection
from eng_tutor.levels import get_level_info
from eng_tutor.review import get_due_count, get_mastered


def get_level_label(level: str | None) -> str:
    if not level:
        return "Not placed yet"
    info = get_level_info(level)
    return f"{level} {info['name']} ({info['korean_name']})"


def get_accuracy_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 60:
        return "yellow"
    elif score >= 40:
        return "dark_orange"
    return "red"


def _retention(total: int, correct: int) -> float:
    if not total:
        return 0.0
    return round(correct / total * 100, 1)


def get_review_stats(db_path: str, now: datetime | None = None) -> dict:
    """Totals from the review log plus the current state of all records."""
    now = now or datetime.now()
    conn = get_connection(db_path)
    row = conn.execute(
        """SELECT COUNT(*) as total,
            SUM(CASE WHEN rating != 'again' THEN 1 ELSE 0 END) as correct,
            MAX(reviewed_at) as last_review
        FROM review_log"""
    ).fetchone()
    conn.close()
    total = row["total"]
    correct = row["correct"] or 0

    records = get_all_records(db_path)
    avg_ease = round(sum(r.ease_factor for r in records) / len(records), 2) if records else 2.5
    return {
        "total_reviews": total,
        "correct_reviews": correct,
        "retention": _retention(total, correct),
        "average_ease_factor": avg_ease,
        "longest_interval": max((r.interval for r in records), default=0),
        "last_review_date": row["last_review"],
        "word_count": len(records),
        "due_now": get_due_count(records, now),
        "mastered_words": len(get_mastered(records)),
    }
