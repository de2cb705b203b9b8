"""Exceptions raised by the solver."""


class WordleError(Exception):
    """Base class for solver errors."""


class InvalidInputError(WordleError, ValueError):
    """A word, key, turn number or history entry is malformed."""


class EmptyPoolError(WordleError):
    """Filtering left no candidate words (contradictory or mistyped feedback)."""

    def __init__(self, message: str = "No remaining candidates"):
        super().__init__(message)


class CachePersistError(WordleError):
    """Saving second-guess cache rows failed; computed entries are still usable."""
