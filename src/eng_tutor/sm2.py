"""SM-2 spaced repetition scheduling with four review ratings."""
import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from eng_tutor.errors import InvalidRatingError
from eng_tutor.models import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR, SrsRecord

logger = logging.getLogger(__name__)

RATINGS = ("again", "hard", "good", "easy")

RATING_SCORES = {"again": 0, "hard": 2, "good": 4, "easy": 5}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rating_score(rating: str) -> int:
    """SM-2 quality score (0-5) of a rating, used for statistics."""
    if rating not in RATING_SCORES:
        raise InvalidRatingError(rating)
    return RATING_SCORES[rating]


def sm2_update(
    rating: str,
    repetitions: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters.

    Args:
        rating: One of again, hard, good, easy
        repetitions: Number of consecutive successful reviews
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days (minimum 1)

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    if rating not in RATINGS:
        raise InvalidRatingError(rating)
    interval = max(1, interval)

    if rating == "again":
        new_ef = ease_factor - 0.2
        new_repetitions = 0
        new_interval = 1
    elif rating == "hard":
        new_ef = ease_factor - 0.15
        new_repetitions = repetitions + 1
        new_interval = max(1, _round_half_up(interval * 1.2))
    else:
        new_repetitions = repetitions + 1
        # Grow from the ease factor in force before this review
        good_interval = max(interval + 1, _round_half_up(interval * ease_factor))
        if rating == "good":
            new_ef = ease_factor
            new_interval = good_interval
        else:
            new_ef = ease_factor + 0.15
            new_interval = max(good_interval, _round_half_up(interval * ease_factor * 1.3))

    new_ef = max(MIN_EASE_FACTOR, new_ef)

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": round(new_ef, 2),
    }


def new_record(word_id: str, now: datetime) -> SrsRecord:
    """Memory state for a word that has never been reviewed. Due immediately."""
    return SrsRecord(
        word_id=word_id,
        interval=1,
        repetitions=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        last_reviewed_date=None,
        next_review_date=now,
    )


def review_word(
    record: Optional[SrsRecord],
    rating: str,
    now: datetime,
    word_id: Optional[str] = None,
) -> SrsRecord:
    """Apply a rating to a word's record and schedule the next review.

    A missing record is treated as the word's first review. The rating is
    checked before anything else so an invalid one leaves no trace.
    """
    if rating not in RATINGS:
        raise InvalidRatingError(rating)
    if record is None:
        if word_id is None:
            raise ValueError("word_id is required when reviewing a word with no record")
        record = new_record(word_id, now)

    updated = sm2_update(
        rating=rating,
        repetitions=record.repetitions,
        ease_factor=record.ease_factor,
        interval=record.interval,
    )
    logger.debug(
        "review %s rated %s: interval %d -> %d, ease %.2f -> %.2f",
        record.word_id, rating, record.interval, updated["interval"],
        record.ease_factor, updated["ease_factor"],
    )
    return SrsRecord(
        word_id=record.word_id,
        interval=updated["interval"],
        repetitions=updated["repetitions"],
        ease_factor=updated["ease_factor"],
        last_reviewed_date=now,
        next_review_date=now + timedelta(days=updated["interval"]),
    )
