"""Tests for database initialization and the SRS record store."""
import json
from datetime import timedelta

from eng_tutor.db import (
    export_records, get_all_records, get_connection, get_record, import_records,
    init_db, save_record,
)
from eng_tutor.models import Word
from eng_tutor.sm2 import review_word
from eng_tutor.words import add_word, get_due_words


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    expected = {"words", "srs_records", "review_log", "user_settings"}
    assert expected.issubset(tables)
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO user_settings (key, value) VALUES ('test', 'val')")
    row = conn.execute("SELECT key, value FROM user_settings WHERE key='test'").fetchone()
    assert row["key"] == "test"
    conn.close()


def test_get_record_missing(tmp_db):
    init_db(tmp_db)
    assert get_record(tmp_db, "nope") is None


def test_save_record_last_write_wins(tmp_db, now):
    init_db(tmp_db)
    add_word(tmp_db, Word("apple", "apple", "사과"), now=now)
    first = review_word(get_record(tmp_db, "apple"), "good", now)
    save_record(tmp_db, first)
    second = review_word(first, "again", now + timedelta(days=3))
    save_record(tmp_db, second)

    stored = get_record(tmp_db, "apple")
    assert stored == second
    assert len(get_all_records(tmp_db)) == 1


def test_export_and_import_records(tmp_db, tmp_path, now):
    init_db(tmp_db)
    add_word(tmp_db, Word("apple", "apple", "사과"), now=now)
    save_record(tmp_db, review_word(get_record(tmp_db, "apple"), "easy", now))
    payload = export_records(tmp_db)
    assert json.loads(payload)["apple"]["wordId"] == "apple"

    other_db = str(tmp_path / "other.db")
    init_db(other_db)
    add_word(other_db, Word("apple", "apple", "사과"), now=now)
    data = json.loads(payload)
    data["ghost"] = {"interval": 4}
    assert import_records(other_db, json.dumps(data)) == 1
    assert get_record(other_db, "apple") == get_record(tmp_db, "apple")
    assert get_record(other_db, "ghost") is None


def test_import_records_with_timezones_builds_queue(tmp_db, now):
    init_db(tmp_db)
    for word_id in ("apple", "begin", "deadline"):
        add_word(tmp_db, Word(word_id, word_id, "뜻"), now=now)
    payload = json.dumps({
        "apple": {"interval": 6, "easeFactor": 2.5, "nextReviewDate": "2025-03-16T09:30:00.000Z"},
        "begin": {"interval": 2, "easeFactor": 2.2, "nextReviewDate": "2025-03-01T09:30:00+09:00"},
    })
    assert import_records(tmp_db, payload) == 2

    due = get_due_words(tmp_db, limit=10, now=now)
    assert [w.word_id for w in due] == ["begin", "deadline"]
    assert get_record(tmp_db, "apple").interval == 6
