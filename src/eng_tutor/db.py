"""Database initialization, connection management and the SRS record store."""
import json
import logging
import os
import sqlite3
from datetime import datetime
from pathlib import Path

from eng_tutor.models import SrsRecord

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.environ.get(
    "ENG_TUTOR_DB", str(Path.home() / ".eng_tutor" / "tutor.db")
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS words (
    word_id TEXT PRIMARY KEY,
    word TEXT NOT NULL,
    meaning TEXT NOT NULL,
    example TEXT,
    pronunciation TEXT,
    added_at TEXT
);

CREATE TABLE IF NOT EXISTS srs_records (
    word_id TEXT PRIMARY KEY REFERENCES words(word_id),
    interval INTEGER NOT NULL DEFAULT 1,
    repetitions INTEGER NOT NULL DEFAULT 0,
    ease_factor REAL NOT NULL DEFAULT 2.5,
    last_reviewed_date TEXT,
    next_review_date TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS review_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    word_id TEXT NOT NULL REFERENCES words(word_id),
    rating TEXT NOT NULL,
    interval INTEGER NOT NULL,
    ease_factor REAL NOT NULL,
    reviewed_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def _row_to_record(row) -> SrsRecord:
    return SrsRecord.from_dict({
        "wordId": row["word_id"],
        "interval": row["interval"],
        "repetitions": row["repetitions"],
        "easeFactor": row["ease_factor"],
        "lastReviewedDate": row["last_reviewed_date"],
        "nextReviewDate": row["next_review_date"],
    })


def get_record(db_path: str, word_id: str) -> SrsRecord | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM srs_records WHERE word_id = ?", (word_id,)).fetchone()
    conn.close()
    return _row_to_record(row) if row else None


def get_all_records(db_path: str) -> list[SrsRecord]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM srs_records ORDER BY word_id").fetchall()
    conn.close()
    return [_row_to_record(r) for r in rows]


def _upsert_record(conn: sqlite3.Connection, record: SrsRecord) -> None:
    data = record.to_dict()
    conn.execute(
        """INSERT INTO srs_records
        (word_id, interval, repetitions, ease_factor, last_reviewed_date, next_review_date)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(word_id) DO UPDATE SET
            interval=excluded.interval,
            repetitions=excluded.repetitions,
            ease_factor=excluded.ease_factor,
            last_reviewed_date=excluded.last_reviewed_date,
            next_review_date=excluded.next_review_date""",
        (data["wordId"], data["interval"], data["repetitions"], data["easeFactor"],
         data["lastReviewedDate"], data["nextReviewDate"]),
    )


def save_record(db_path: str, record: SrsRecord) -> None:
    """Write a record, replacing any stored one for the same word (last write wins)."""
    conn = get_connection(db_path)
    _upsert_record(conn, record)
    conn.commit()
    conn.close()


def save_review(db_path: str, record: SrsRecord, rating: str) -> None:
    """Store a reviewed record and its review_log row in one transaction."""
    conn = get_connection(db_path)
    _upsert_record(conn, record)
    conn.execute(
        "INSERT INTO review_log (word_id, rating, interval, ease_factor, reviewed_at) VALUES (?, ?, ?, ?, ?)",
        (record.word_id, rating, record.interval, record.ease_factor,
         (record.last_reviewed_date or datetime.now()).isoformat()),
    )
    conn.commit()
    conn.close()


def export_records(db_path: str) -> str:
    """Dump all records as JSON keyed by wordId."""
    records = {r.word_id: r.to_dict() for r in get_all_records(db_path)}
    return json.dumps(records, indent=2, ensure_ascii=False)


def import_records(db_path: str, payload: str) -> int:
    """Load records exported by export_records. Words must already exist."""
    data = json.loads(payload)
    conn = get_connection(db_path)
    known = {r["word_id"] for r in conn.execute("SELECT word_id FROM words").fetchall()}
    count = 0
    for word_id, item in data.items():
        if word_id not in known:
            logger.warning("Skipping record for unknown word %s", word_id)
            continue
        _upsert_record(conn, SrsRecord.from_dict(dict(item, wordId=word_id)))
        count += 1
    conn.commit()
    conn.close()
    logger.info("Imported %d SRS records", count)
    return count
