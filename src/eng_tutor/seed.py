"""Seed the database with the starter vocabulary."""
import json
import logging
from pathlib import Path

from eng_tutor.db import get_connection
from eng_tutor.importer import word_from_mapping
from eng_tutor.words import add_words

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds any words."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM words").fetchone()[0]
    conn.close()
    return count > 0


def seed_words(db_path: str) -> int:
    """Insert the starter words from starter_words.json."""
    data = json.loads((CONTENT_DIR / "starter_words.json").read_text(encoding="utf-8"))
    added = add_words(db_path, [word_from_mapping(w) for w in data["words"]])
    logger.info("Seeded %d starter words", added)
    return added


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_words(db_path)
