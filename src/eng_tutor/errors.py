"""Exceptions raised by the learning engine."""


class EngineError(Exception):
    """Base class for engine errors surfaced to the caller."""


class EmptyBankError(EngineError):
    """No unasked question is left at any placement level."""


class TestNotCompleteError(EngineError):
    """get_result was called before submit_answer said the test is over."""

    __test__ = False  # not a pytest class


class TestCompleteError(EngineError):
    """The placement test already ended; no more questions or answers."""

    __test__ = False


class InvalidRatingError(EngineError, ValueError):
    def __init__(self, rating):
        super().__init__(f"Invalid review rating: {rating!r} (expected again, hard, good or easy)")
        self.rating = rating
