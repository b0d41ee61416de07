"""Word list import for various file formats."""
import csv
import json
import logging
import re
from pathlib import Path

from eng_tutor.models import Word
from eng_tutor.words import add_words

logger = logging.getLogger(__name__)

TEXT_SEPARATORS = ("\t", " - ", " = ", ":")


def make_word_id(word: str) -> str:
    """Stable id derived from the headword, e.g. "Ice cream" -> "ice-cream"."""
    slug = re.sub(r"[^a-z0-9]+", "-", word.lower()).strip("-")
    if not slug:
        raise ValueError(f"Cannot build an id for word {word!r}")
    return slug


def word_from_mapping(item: dict) -> Word:
    word = str(item["word"]).strip()
    return Word(
        word_id=str(item.get("wordId") or item.get("word_id") or make_word_id(word)),
        word=word,
        meaning=str(item["meaning"]).strip(),
        example=str(item.get("example") or ""),
        pronunciation=str(item.get("pronunciation") or ""),
    )


def _parse_text_line(line: str) -> Word | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    for sep in TEXT_SEPARATORS:
        if sep in line:
            word, meaning = (part.strip() for part in line.split(sep, 1))
            if word and meaning:
                return Word(word_id=make_word_id(word), word=word, meaning=meaning)
    logger.warning("Skipping unparseable line: %r", line)
    return None


def read_word_list(file_path: str) -> list[Word]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        items = data["words"] if isinstance(data, dict) else data
        return [word_from_mapping(i) for i in items]
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        items = data["words"] if isinstance(data, dict) else data
        return [word_from_mapping(i) for i in items or []]
    elif suffix == ".csv":
        with path.open(newline="", encoding="utf-8") as fh:
            return [word_from_mapping(row) for row in csv.DictReader(fh)]
    else:
        # Plain text: one "word<sep>meaning" pair per line
        words = (_parse_text_line(line) for line in path.read_text(encoding="utf-8").splitlines())
        return [w for w in words if w is not None]


def import_word_list(db_path: str, file_path: str) -> dict:
    """Import a word list into the database. Existing word ids are skipped."""
    words = read_word_list(file_path)
    added = add_words(db_path, words)
    logger.info("Imported %s: %d read, %d new", Path(file_path).name, len(words), added)
    return {"filename": Path(file_path).name, "read": len(words), "added": added}
