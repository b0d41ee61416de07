from eng_tutor.db import init_db, get_connection, get_all_records
from eng_tutor.seed import is_seeded, seed_words, seed_all


def test_seed_words(tmp_db):
    init_db(tmp_db)
    added = seed_words(tmp_db)
    conn = get_connection(tmp_db)
    words = conn.execute("SELECT * FROM words").fetchall()
    conn.close()
    assert added == len(words) == 20
    assert all(w["meaning"] for w in words)
    # Every starter word gets a record that is due right away
    records = get_all_records(tmp_db)
    assert len(records) == 20
    assert all(r.repetitions == 0 and r.last_reviewed_date is None for r in records)


def test_is_seeded(tmp_db):
    init_db(tmp_db)
    assert not is_seeded(tmp_db)
    seed_words(tmp_db)
    assert is_seeded(tmp_db)


def test_seed_all_idempotent(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    seed_all(tmp_db)  # second call should be no-op
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM words").fetchone()[0] == 20
    conn.close()
