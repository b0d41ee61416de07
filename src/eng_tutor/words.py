"""Vocabulary storage and SRS review flow."""
import logging
from datetime import datetime
from typing import Optional

from eng_tutor.db import get_all_records, get_connection, get_record, save_review
from eng_tutor.models import Word
from eng_tutor.review import get_today_progress, get_words_for_review
from eng_tutor.sm2 import new_record, review_word

logger = logging.getLogger(__name__)


def _insert_word(conn, word: Word, now: datetime) -> bool:
    exists = conn.execute("SELECT 1 FROM words WHERE word_id = ?", (word.word_id,)).fetchone()
    if exists:
        return False
    conn.execute(
        "INSERT INTO words (word_id, word, meaning, example, pronunciation, added_at) VALUES (?, ?, ?, ?, ?, ?)",
        (word.word_id, word.word, word.meaning, word.example, word.pronunciation, now.isoformat()),
    )
    record = new_record(word.word_id, now)
    conn.execute(
        "INSERT INTO srs_records (word_id, interval, repetitions, ease_factor, next_review_date) VALUES (?, ?, ?, ?, ?)",
        (record.word_id, record.interval, record.repetitions, record.ease_factor,
         record.next_review_date.isoformat()),
    )
    return True


def add_word(db_path: str, word: Word, now: Optional[datetime] = None) -> bool:
    """Add a word with a fresh SRS record. Returns False if it already exists."""
    now = now or datetime.now()
    conn = get_connection(db_path)
    added = _insert_word(conn, word, now)
    conn.commit()
    conn.close()
    return added


def add_words(db_path: str, words, now: Optional[datetime] = None) -> int:
    """Add several words, skipping ids already stored. Returns the number added."""
    now = now or datetime.now()
    conn = get_connection(db_path)
    added = sum(1 for w in words if _insert_word(conn, w, now))
    conn.commit()
    conn.close()
    if added:
        logger.info("Added %d new words", added)
    return added


def get_word(db_path: str, word_id: str) -> Word | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM words WHERE word_id = ?", (word_id,)).fetchone()
    conn.close()
    if not row:
        return None
    return Word(
        word_id=row["word_id"],
        word=row["word"],
        meaning=row["meaning"],
        example=row["example"] or "",
        pronunciation=row["pronunciation"] or "",
    )


def remove_word(db_path: str, word_id: str) -> bool:
    """Delete a word with its record and review history. Returns False if it was not stored."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM review_log WHERE word_id = ?", (word_id,))
    conn.execute("DELETE FROM srs_records WHERE word_id = ?", (word_id,))
    removed = conn.execute("DELETE FROM words WHERE word_id = ?", (word_id,)).rowcount > 0
    conn.commit()
    conn.close()
    return removed


def reset_all_progress(db_path: str, now: Optional[datetime] = None) -> int:
    """Put every word back to a never-reviewed record and clear the review log.

    Returns the number of records reset.
    """
    now = now or datetime.now()
    conn = get_connection(db_path)
    word_ids = [r["word_id"] for r in conn.execute("SELECT word_id FROM srs_records").fetchall()]
    for word_id in word_ids:
        record = new_record(word_id, now)
        conn.execute(
            """UPDATE srs_records SET interval=?, repetitions=?, ease_factor=?,
            last_reviewed_date=NULL, next_review_date=? WHERE word_id=?""",
            (record.interval, record.repetitions, record.ease_factor,
             record.next_review_date.isoformat(), word_id),
        )
    conn.execute("DELETE FROM review_log")
    conn.commit()
    conn.close()
    logger.info("Reset review progress for %d words", len(word_ids))
    return len(word_ids)


def record_review(db_path: str, word_id: str, rating: str, now: Optional[datetime] = None):
    """Apply a rating to a stored word and persist the new record."""
    now = now or datetime.now()
    record = review_word(get_record(db_path, word_id), rating, now, word_id=word_id)
    save_review(db_path, record, rating)
    return record


def get_due_words(db_path: str, limit: int = 20, now: Optional[datetime] = None) -> list[Word]:
    now = now or datetime.now()
    due = get_words_for_review(get_all_records(db_path), now, limit)
    words = (get_word(db_path, r.word_id) for r in due)
    return [w for w in words if w is not None]


def get_today_review_progress(db_path: str, daily_goal: int, now: Optional[datetime] = None) -> dict:
    return get_today_progress(get_all_records(db_path), now or datetime.now(), daily_goal)
