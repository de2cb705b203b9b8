"""
Optimal-Guess Search
====================

Finds the guess that splits a pool into the most bins.

Candidates are scanned in a fixed order (pool members first, then the wider
candidate list, duplicates skipped):

1. Perfect separation: the first candidate giving every pool word its own
   bin is returned at once. Nothing can beat a one-to-one split.
2. Otherwise the best candidate is the one with the most bins, ties broken
   by the lowest population variance of bin sizes. Only a strict
   improvement replaces the current best, so earlier candidates win ties.
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
from numba import jit

from .errors import EmptyPoolError, WordleError
from .feedback import N_PATTERNS, canonical_word, feedback_matrix

SOURCE_POOL = 'remaining words'
SOURCE_DICTIONARY = 'full word list'


@dataclass(frozen=True)
class GuessChoice:
    word: str
    bins: int
    bin_sizes: List[int]
    variance: float
    perfect: bool
    source: str
    reason: str


# ============================================================================
# NUMBA-ACCELERATED PARTITION SCAN
# ============================================================================

@jit(nopython=True, cache=True)
def get_partition_sizes(feedback_row: np.ndarray) -> np.ndarray:
    """Count how many pool words fall into each of the 243 patterns."""
    sizes = np.zeros(243, dtype=np.int32)
    for i in range(len(feedback_row)):
        sizes[feedback_row[i]] += 1
    return sizes


@jit(nopython=True, cache=True)
def scan_partitions(matrix: np.ndarray):
    """
    Scan candidate rows of a (candidates x pool) pattern matrix in order.

    Returns:
        (row, bins, variance, perfect). row is -1 if there are no rows.
    """
    n_rows = matrix.shape[0]
    n_pool = matrix.shape[1]
    sizes = np.zeros(N_PATTERNS, dtype=np.int32)

    best_row = -1
    best_bins = 0
    best_variance = np.inf

    for i in range(n_rows):
        sizes[:] = 0
        for j in range(n_pool):
            sizes[matrix[i, j]] += 1

        bins = 0
        for k in range(N_PATTERNS):
            if sizes[k] > 0:
                bins += 1

        if bins == n_pool:
            return i, bins, 0.0, True

        mean = n_pool / bins
        variance = 0.0
        for k in range(N_PATTERNS):
            if sizes[k] > 0:
                variance += (sizes[k] - mean) ** 2
        variance /= bins

        if bins > best_bins or (bins == best_bins and variance < best_variance):
            best_row = i
            best_bins = bins
            best_variance = variance

    return best_row, best_bins, best_variance, False


# ============================================================================
# SEARCH
# ============================================================================

def single_word_choice(word: str) -> GuessChoice:
    return GuessChoice(word=word, bins=1, bin_sizes=[1], variance=0.0, perfect=True,
                       source=SOURCE_POOL, reason="Only one word left")


def two_word_choice(pool: Sequence[str]) -> GuessChoice:
    # Guessing either word splits the pair: GGGGG for itself, anything else for the other.
    return GuessChoice(word=pool[0], bins=2, bin_sizes=[1, 1], variance=0.0, perfect=True,
                       source=SOURCE_POOL, reason="Two words left - any guess will solve")


def candidate_order(pool: Sequence[str], candidates: Sequence[str]) -> List[str]:
    """Pool members first, then the other candidates, without duplicates."""
    return list(dict.fromkeys(list(pool) + list(candidates)))


def choose_from_matrix(matrix: np.ndarray, words: Sequence[str], n_pool_rows: int) -> GuessChoice:
    """
    Pick the best row of a pattern matrix.

    Args:
        matrix: (len(words), pool size) pattern codes, rows in scan order
        words: candidate word for each row
        n_pool_rows: the first n_pool_rows rows are pool members
    """
    n_pool = matrix.shape[1]
    if n_pool == 0:
        raise EmptyPoolError()
    row, bins, variance, perfect = scan_partitions(matrix)
    if row < 0:
        raise WordleError("No candidate guesses to search")

    sizes = get_partition_sizes(matrix[row])
    bin_sizes = sorted((int(s) for s in sizes if s > 0), reverse=True)
    source = SOURCE_POOL if row < n_pool_rows else SOURCE_DICTIONARY
    variance = float(variance)

    if perfect:
        reason = f"PERFECT SEPARATION ({source}): Each of {bins} bins contains exactly 1 word"
    else:
        reason = f"Maximizes bins ({bins}) with optimal distribution variance ({variance:.2f})"

    return GuessChoice(word=words[row], bins=int(bins), bin_sizes=bin_sizes,
                       variance=variance, perfect=bool(perfect), source=source,
                       reason=reason)


def find_best(pool: Sequence[str], candidates: Sequence[str] = ()) -> GuessChoice:
    """
    Best guess for ``pool``, searching pool members then ``candidates``.

    With no candidates the search is restricted to the pool itself.
    """
    pool = list(dict.fromkeys(canonical_word(w) for w in pool))
    if not pool:
        raise EmptyPoolError()
    if len(pool) == 1:
        return single_word_choice(pool[0])
    if len(pool) == 2:
        return two_word_choice(pool)

    order = candidate_order(pool, [canonical_word(w) for w in candidates])
    matrix = feedback_matrix(order, pool)
    return choose_from_matrix(matrix, order, len(pool))
