"""
Per-turn guess selection.

- Turn 1: the opener, no search.
- Turn 2: second-guess cache for the turn-1 (guess, key). A longer history
  has narrowed the pool past what the cache covers, so it is searched like
  turns 4 and 5.
- Turns 3 and 6: search the remaining words only.
- Turns 4 and 5: remaining words, then the whole guess list. By then the
  pool is small enough that an off-pool word often separates it perfectly.
- From turn 2 on, one or two remaining words are guessed directly.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .cache import SecondGuessCache
from .errors import EmptyPoolError, InvalidInputError
from .feedback import canonical_word, parse_key
from .scoring import GuessAnalysis, analyze
from .search import single_word_choice, two_word_choice
from .solver import WordleSolver

log = logging.getLogger(__name__)

DEFAULT_OPENER = 'CRATE'
MAX_GUESSES = 6
WIDE_SEARCH_TURNS = (4, 5)
NO_CANDIDATES = "No remaining candidates"


class GuessResult(NamedTuple):
    guess: str
    key: str


@dataclass(frozen=True)
class BestGuess:
    best_guess: Optional[str]
    remaining_count: int
    bins: int = 0
    reason: str = ''
    cached: Optional[bool] = None
    analysis: Optional[GuessAnalysis] = None
    error: Optional[str] = None


HistoryItem = Union[GuessResult, Tuple[str, str]]


def normalize_history(history: Sequence[HistoryItem]):
    """Canonical (guess, key) pairs; malformed entries raise InvalidInputError."""
    result = []
    for item in history:
        try:
            guess, key = item
        except (TypeError, ValueError):
            raise InvalidInputError(f"History entries must be (guess, key) pairs, got {item!r}")
        result.append(GuessResult(canonical_word(guess), parse_key(key)))
    return result


class GuessAdvisor:
    """Recommends a guess for any turn of a game in progress."""

    def __init__(self, solver: WordleSolver, cache: Optional[SecondGuessCache] = None,
                 opener: str = DEFAULT_OPENER):
        self.solver = solver
        self.cache = cache if cache is not None else SecondGuessCache(solver)
        self.opener = canonical_word(opener)

    def get_best_guess(self, history: Sequence[HistoryItem], turn_number: int,
                       opener: Optional[str] = None) -> BestGuess:
        """
        Best guess for ``turn_number`` (1-6) given the guesses made so far.

        An empty pool is reported through ``error`` rather than raised.
        """
        if not isinstance(turn_number, int) or not 1 <= turn_number <= MAX_GUESSES:
            raise InvalidInputError(f"Turn number must be 1-{MAX_GUESSES}, got {turn_number!r}")
        history = normalize_history(history)
        opener = canonical_word(opener) if opener else self.opener

        if turn_number == 2 and not history:
            raise InvalidInputError("Turn 2 needs the first guess and its key")

        pool = self.solver.apply_history(history)
        if len(pool) == 0:
            return BestGuess(best_guess=None, remaining_count=0, error=NO_CANDIDATES)

        if turn_number == 1:
            return self._result(opener, pool, "Opening guess")

        try:
            return self._choose(turn_number, pool, history)
        except EmptyPoolError as e:
            return BestGuess(best_guess=None, remaining_count=len(pool), error=str(e))

    def _choose(self, turn_number: int, pool: np.ndarray, history) -> BestGuess:
        n = len(pool)
        if n == 1:
            choice = single_word_choice(self.solver.answers[pool[0]])
            return self._result(choice.word, pool, choice.reason)
        if n == 2:
            choice = two_word_choice(self.solver.words(pool))
            return self._result(choice.word, pool, choice.reason)

        if turn_number == 2 and len(history) > 1:
            # The cache only covers the opener's key; search the narrowed pool instead.
            log.debug("Turn 2 with %d history entries: searching", len(history))
            choice = self.solver.find_best(pool, include_guesses=True)
            return self._result(choice.word, pool, choice.reason)

        if turn_number == 2:
            first = history[0]
            second = self.cache.lookup_or_compute(first.guess, first.key)
            if second is None:
                return BestGuess(best_guess=None, remaining_count=n,
                                 error=f"No recommendation available for evaluation {first.key}")
            reason = second.reason + (" (cached)" if second.cached else " (calculated)")
            return self._result(second.word, pool, reason, cached=second.cached)

        wide = turn_number in WIDE_SEARCH_TURNS
        log.debug("Turn %d: searching %s for %d words", turn_number,
                  "remaining + full list" if wide else "remaining words", n)
        choice = self.solver.find_best(pool, include_guesses=wide)
        return self._result(choice.word, pool, choice.reason)

    def _result(self, word: str, pool: np.ndarray, reason: str,
                cached: Optional[bool] = None) -> BestGuess:
        analysis = analyze(word, self.solver.words(pool))
        return BestGuess(best_guess=word, remaining_count=len(pool), bins=analysis.bins_count,
                         reason=reason, cached=cached, analysis=analysis)
