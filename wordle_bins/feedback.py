"""
Wordle Feedback
===============

Evaluation of a guess against an answer, in two forms:

- ``evaluate`` returns the human-readable key (e.g. ``-Y-YY``) and is the
  reference two-pass implementation used for single comparisons.
- ``compute_feedback`` / ``compute_feedback_matrix`` are numba kernels that
  return base-3 pattern codes (0-242) for bulk comparisons.

Pattern code encoding: position i contributes ``trit * 3**i`` with
``-``=0, ``Y``=1, ``G``=2, so ``GGGGG`` is 242.
"""

import re
from itertools import product
from typing import List, Sequence

import numpy as np
from numba import jit, prange

from .errors import InvalidInputError


# ============================================================================
# CONSTANTS
# ============================================================================

WORD_LENGTH = 5
N_PATTERNS = 243  # 3^5 possible feedback patterns

MISS_CHAR = '-'
CORRECT_KEY = 'GGGGG'
KEY_CHARS = '-YG'  # indexed by trit value
KEY_ORDER = '-GY'  # enumeration order for all_keys()

_WORD_RE = re.compile(r'^[A-Z]{5}$')
_NON_KEY_RE = re.compile(r'[^YG]')


# ============================================================================
# CANONICALIZATION
# ============================================================================

def canonical_word(s: str) -> str:
    """Trim and uppercase ``s``; it must then be exactly five letters A-Z."""
    if not isinstance(s, str):
        raise InvalidInputError(f"Word must be a string, got {type(s).__name__}")
    word = s.strip().upper()
    if not _WORD_RE.match(word):
        raise InvalidInputError(f"'{s}' is not a 5-letter word")
    return word


def canonical_key(s: str) -> str:
    """
    Canonical form of a user-entered key.

    Uppercases, trims, and replaces every character other than 'G' and 'Y'
    with '-'. Never raises; the length is not checked here.
    """
    return _NON_KEY_RE.sub(MISS_CHAR, s.upper().strip())


def parse_key(s: str) -> str:
    """Canonicalize ``s`` and require exactly five feedback characters."""
    if not isinstance(s, str):
        raise InvalidInputError(f"Key must be a string, got {type(s).__name__}")
    key = canonical_key(s)
    if len(key) != WORD_LENGTH:
        raise InvalidInputError(f"'{s}' is not a 5-character feedback key")
    return key


# ============================================================================
# REFERENCE EVALUATOR
# ============================================================================

def evaluate(guess: str, answer: str) -> str:
    """
    Return the feedback key for ``guess`` played against ``answer``.

    Greens are marked first and their answer letters consumed; each remaining
    guess letter then consumes the first unused matching answer letter (Y) or
    gets '-'. This is what keeps repeated letters from being double counted:

        >>> evaluate('SASSY', 'CHESS')
        'Y--G-'
    """
    guess = canonical_word(guess)
    answer = canonical_word(answer)
    return _evaluate(guess, answer)


def _evaluate(guess: str, answer: str) -> str:
    key = [MISS_CHAR] * WORD_LENGTH
    scratch = list(answer)

    # First pass: greens
    for i in range(WORD_LENGTH):
        if guess[i] == scratch[i]:
            key[i] = 'G'
            scratch[i] = None

    # Second pass: yellows consume the first unused match
    for i in range(WORD_LENGTH):
        if key[i] == 'G':
            continue
        try:
            idx = scratch.index(guess[i])
        except ValueError:
            continue
        key[i] = 'Y'
        scratch[idx] = None

    return ''.join(key)


def is_solved(key: str) -> bool:
    return canonical_key(key) == CORRECT_KEY


# ============================================================================
# PATTERN CODES
# ============================================================================

def pattern_to_key(pattern: int) -> str:
    """Convert pattern code (0-242) to key string, e.g. 242 -> 'GGGGG'."""
    pattern = int(pattern)
    if not 0 <= pattern < N_PATTERNS:
        raise InvalidInputError(f"Pattern code out of range: {pattern}")
    chars = []
    for _ in range(WORD_LENGTH):
        chars.append(KEY_CHARS[pattern % 3])
        pattern //= 3
    return ''.join(chars)


def key_to_pattern(key: str) -> int:
    """Convert a key string (e.g. '-Y-YG') to its pattern code."""
    key = parse_key(key)
    result = 0
    multiplier = 1
    for c in key:
        result += KEY_CHARS.index(c) * multiplier
        multiplier *= 3
    return result


def all_keys() -> List[str]:
    """All 243 feedback keys, in '-', 'G', 'Y' product order."""
    return [''.join(p) for p in product(KEY_ORDER, repeat=WORD_LENGTH)]


def words_to_chars(words: Sequence[str]) -> np.ndarray:
    """Convert canonical words to an (n, 5) array of letter codes 0-25."""
    arr = np.zeros((len(words), WORD_LENGTH), dtype=np.int32)
    for i, w in enumerate(words):
        for j, c in enumerate(w):
            arr[i, j] = ord(c) - ord('A')
    return arr


# ============================================================================
# NUMBA-ACCELERATED FEEDBACK COMPUTATION
# ============================================================================

@jit(nopython=True, cache=True)
def compute_feedback(guess: np.ndarray, answer: np.ndarray) -> int:
    """
    Compute the feedback pattern code for a guess against an answer.

    Args:
        guess: shape (5,) array of letter codes (0-25)
        answer: shape (5,) array of letter codes

    Returns:
        Integer feedback pattern (0-242)
    """
    feedback = np.zeros(5, dtype=np.int32)
    answer_counts = np.zeros(26, dtype=np.int32)

    for i in range(5):
        answer_counts[answer[i]] += 1

    # First pass: mark greens
    for i in range(5):
        if guess[i] == answer[i]:
            feedback[i] = 2
            answer_counts[guess[i]] -= 1

    # Second pass: mark yellows
    for i in range(5):
        if feedback[i] == 0:
            c = guess[i]
            if answer_counts[c] > 0:
                feedback[i] = 1
                answer_counts[c] -= 1

    return feedback[0] + 3*feedback[1] + 9*feedback[2] + 27*feedback[3] + 81*feedback[4]


@jit(nopython=True, parallel=True, cache=True)
def compute_feedback_matrix(guess_chars: np.ndarray, answer_chars: np.ndarray) -> np.ndarray:
    """
    Compute feedback for all guess/answer pairs in parallel.

    Returns:
        shape (n_guesses, n_answers) matrix of pattern codes
    """
    n_guesses = guess_chars.shape[0]
    n_answers = answer_chars.shape[0]
    result = np.zeros((n_guesses, n_answers), dtype=np.uint8)

    for i in prange(n_guesses):
        for j in range(n_answers):
            result[i, j] = compute_feedback(guess_chars[i], answer_chars[j])

    return result


def feedback_matrix(guesses: Sequence[str], answers: Sequence[str]) -> np.ndarray:
    """Pattern-code matrix for canonical word lists (guesses x answers)."""
    return compute_feedback_matrix(words_to_chars(guesses), words_to_chars(answers))
