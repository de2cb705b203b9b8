"""
Bin partitioning of a word pool by the feedback a fixed guess produces.

A guess is good when it splits the pool into many small bins: whatever the
feedback turns out to be, few words remain.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from .feedback import _evaluate, canonical_word, parse_key


def _canonical_pool(pool: Iterable[str]) -> List[str]:
    return [canonical_word(w) for w in pool]


def bin_counts(guess: str, pool: Sequence[str]) -> Dict[str, int]:
    """Map each feedback key to the number of pool words producing it."""
    guess = canonical_word(guess)
    bins: Dict[str, int] = {}
    for answer in _canonical_pool(pool):
        key = _evaluate(guess, answer)
        bins[key] = bins.get(key, 0) + 1
    return bins


def bin_members(guess: str, pool: Sequence[str]) -> Dict[str, List[str]]:
    """Map each feedback key to the pool words producing it, in pool order."""
    guess = canonical_word(guess)
    bins: Dict[str, List[str]] = {}
    for answer in _canonical_pool(pool):
        bins.setdefault(_evaluate(guess, answer), []).append(answer)
    return bins


def bin_sizes(guess: str, pool: Sequence[str]) -> List[int]:
    """Bin sizes only, largest first."""
    return sorted(bin_counts(guess, pool).values(), reverse=True)


def solution_guaranteed(guess: str, pool: Sequence[str]) -> bool:
    """True when every pool word lands in its own bin."""
    guess = canonical_word(guess)
    seen = set()
    for answer in _canonical_pool(pool):
        key = _evaluate(guess, answer)
        if key in seen:
            return False
        seen.add(key)
    return True


def filter_pool(guess: str, key: str, pool: Sequence[str]) -> List[str]:
    """Words from ``pool`` that would produce ``key`` for ``guess``."""
    guess = canonical_word(guess)
    key = parse_key(key)
    return [w for w in _canonical_pool(pool) if _evaluate(guess, w) == key]


def apply_guesses(pool: Sequence[str], history: Iterable[Tuple[str, str]]) -> List[str]:
    """
    Narrow ``pool`` by each (guess, key) pair in turn.

    The result is always a subset of ``pool``, in the same order.
    """
    remaining = _canonical_pool(pool)
    for guess, key in history:
        remaining = filter_pool(guess, key, remaining)
        if not remaining:
            break
    return remaining
