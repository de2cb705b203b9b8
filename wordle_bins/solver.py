"""
Wordle Solver
=============

Holds the dictionary and a precomputed feedback matrix so that searches over
it are slices of one array rather than fresh word-by-word evaluations.

Two word lists:
- answers: words that can be the daily answer (the "likely answers" pool)
- guesses: words that may be played; defaults to the answers, and always
  contains every answer
"""

import logging
import os
import time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import EmptyPoolError
from .feedback import (
    canonical_word,
    compute_feedback_matrix,
    key_to_pattern,
    words_to_chars,
)
from .search import (
    GuessChoice,
    choose_from_matrix,
    single_word_choice,
    two_word_choice,
)

log = logging.getLogger(__name__)

WORDS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "words")
DEFAULT_ANSWERS_FILE = os.path.join(WORDS_DIR, "answers.txt")


def load_words(filepath: str = DEFAULT_ANSWERS_FILE) -> List[str]:
    """Load a word list, one word per line, canonicalized and de-duplicated."""
    with open(filepath, 'r') as f:
        words = [canonical_word(line) for line in f if line.strip()]
    return list(dict.fromkeys(words))


class WordleSolver:
    """
    Dictionary plus guess x answer feedback matrix.

    Pools are passed around as int32 arrays of answer indices, in dictionary
    order.
    """

    def __init__(self, answers: Sequence[str], guesses: Optional[Sequence[str]] = None):
        """
        Args:
            answers: possible answer words
            guesses: valid guesses (if None, uses answers); answers missing
                from it are appended
        """
        self.answers = list(dict.fromkeys(canonical_word(w) for w in answers))
        guess_words = [canonical_word(w) for w in (guesses or [])]
        self.guesses = list(dict.fromkeys(guess_words + self.answers))

        self.answer_to_idx = {w: i for i, w in enumerate(self.answers)}
        self.guess_to_idx = {w: i for i, w in enumerate(self.guesses)}

        self.n_answers = len(self.answers)
        self.n_guesses = len(self.guesses)

        self.answer_chars = words_to_chars(self.answers)
        self.guess_chars = words_to_chars(self.guesses)

        # shape (n_guesses, n_answers)
        log.info("Precomputing feedback matrix (%d guesses x %d answers)...",
                 self.n_guesses, self.n_answers)
        start = time.time()
        self.feedback_matrix = compute_feedback_matrix(self.guess_chars, self.answer_chars)
        log.info("Done in %.1fs", time.time() - start)

        # answer index -> guess index, for scanning pool members as guesses
        self._answer_guess_idx = np.array(
            [self.guess_to_idx[w] for w in self.answers], dtype=np.int32)

    @classmethod
    def from_files(cls, answers_file: str = DEFAULT_ANSWERS_FILE,
                   guesses_file: Optional[str] = None) -> "WordleSolver":
        answers = load_words(answers_file)
        guesses = load_words(guesses_file) if guesses_file else None
        return cls(answers, guesses)

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def full_pool(self) -> np.ndarray:
        return np.arange(self.n_answers, dtype=np.int32)

    def words(self, pool: np.ndarray) -> List[str]:
        return [self.answers[i] for i in pool]

    def feedback_row(self, word: str) -> np.ndarray:
        """Pattern codes of ``word`` against every answer."""
        word = canonical_word(word)
        idx = self.guess_to_idx.get(word)
        if idx is not None:
            return self.feedback_matrix[idx]
        return compute_feedback_matrix(words_to_chars([word]), self.answer_chars)[0]

    def filter_pool(self, guess: str, key: str, pool: Optional[np.ndarray] = None) -> np.ndarray:
        """Answer indices in ``pool`` consistent with ``guess`` scoring ``key``."""
        if pool is None:
            pool = self.full_pool()
        row = self.feedback_row(guess)
        pattern = key_to_pattern(key)
        return pool[row[pool] == pattern]

    def apply_history(self, history: Iterable[Tuple[str, str]],
                      pool: Optional[np.ndarray] = None) -> np.ndarray:
        if pool is None:
            pool = self.full_pool()
        for guess, key in history:
            pool = self.filter_pool(guess, key, pool)
            if len(pool) == 0:
                break
        return pool

    def partition(self, word: str, pool: Optional[np.ndarray] = None) -> Dict[int, np.ndarray]:
        """Group ``pool`` by the pattern code ``word`` produces against each member."""
        if pool is None:
            pool = self.full_pool()
        row = self.feedback_row(word)[pool]
        groups: Dict[int, np.ndarray] = {}
        for pattern in np.unique(row):
            groups[int(pattern)] = pool[row == pattern]
        return groups

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def find_best(self, pool: np.ndarray, include_guesses: bool = True) -> GuessChoice:
        """
        Best guess for ``pool`` (answer indices).

        Pool members are scanned first; with ``include_guesses`` the rest of
        the guess list follows in dictionary order.
        """
        n = len(pool)
        if n == 0:
            raise EmptyPoolError()
        if n == 1:
            return single_word_choice(self.answers[pool[0]])
        if n == 2:
            return two_word_choice(self.words(pool))

        order = self._answer_guess_idx[pool]
        if include_guesses:
            rest = np.ones(self.n_guesses, dtype=np.bool_)
            rest[order] = False
            order = np.concatenate([order, np.flatnonzero(rest).astype(np.int32)])

        matrix = self.feedback_matrix[np.ix_(order, pool)]
        return choose_from_matrix(matrix, [self.guesses[g] for g in order], n)
