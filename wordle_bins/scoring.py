"""
Guess scoring from bin distributions.

distribution score = 10 * bins - stddev(bin sizes)

The number of bins dominates; among guesses with the same number of bins the
one with more evenly sized bins scores higher.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .bins import apply_guesses, bin_members
from .errors import InvalidInputError
from .feedback import canonical_key, canonical_word, parse_key

BREAKDOWN_LIMIT = 100  # pools smaller than this get a per-bin breakdown
MAX_POOL_FOR_OPTIMAL = 2000
MAX_OPTIMAL_CANDIDATES = 900


@dataclass(frozen=True)
class BinBreakdown:
    evaluation: str
    count: int
    words: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class GuessAnalysis:
    """How one guess splits one pool."""
    guess: str
    bins_count: int
    bin_sizes: List[int]
    avg_bin_size: float
    min_bin_size: int
    max_bin_size: int
    distribution_score: float
    actual_evaluation_count: Optional[int] = None
    actual_evaluation_words: Optional[List[str]] = None
    bin_breakdown: Optional[List[BinBreakdown]] = None


def score_bin_distribution(sizes: Sequence[int]) -> float:
    """10 * number of bins minus the population stddev of their sizes."""
    if len(sizes) == 0:
        return 0.0
    return 10.0 * len(sizes) - float(np.std(np.asarray(sizes, dtype=np.float64)))


def bin_variance(sizes: Sequence[int]) -> float:
    """Population variance of bin sizes (0 for fewer than two bins)."""
    if len(sizes) <= 1:
        return 0.0
    return float(np.var(np.asarray(sizes, dtype=np.float64)))


def analyze(guess: str, pool: Sequence[str], key: Optional[str] = None) -> GuessAnalysis:
    """
    Analyze how ``guess`` partitions ``pool``.

    If ``key`` is given, the analysis also reports how many (and, for small
    pools, which) words produce that key. Pools under 100 words include the
    full bin breakdown.
    """
    guess = canonical_word(guess)
    bins = bin_members(guess, pool)
    sizes = [len(words) for words in bins.values()]

    small = len(pool) < BREAKDOWN_LIMIT

    actual_count = None
    actual_words = None
    if key is not None:
        matched = bins.get(canonical_key(key), [])
        actual_count = len(matched)
        if small:
            actual_words = list(matched)

    breakdown = None
    if small:
        breakdown = [BinBreakdown(evaluation=k, count=len(v), words=list(v))
                     for k, v in bins.items()]

    return GuessAnalysis(
        guess=guess,
        bins_count=len(bins),
        bin_sizes=sizes,
        avg_bin_size=float(np.mean(sizes)) if sizes else 0.0,
        min_bin_size=min(sizes) if sizes else 0,
        max_bin_size=max(sizes) if sizes else 0,
        distribution_score=score_bin_distribution(sizes),
        actual_evaluation_count=actual_count,
        actual_evaluation_words=actual_words,
        bin_breakdown=breakdown,
    )


def rank_guesses(pool: Sequence[str], candidates: Optional[Sequence[str]] = None,
                 top_n: int = 1) -> List[GuessAnalysis]:
    """
    Best ``top_n`` guesses by distribution score, highest first.

    Candidates default to the pool itself. Equal scores keep candidate order.
    """
    if candidates is None:
        candidates = pool
    analyses: Dict[str, GuessAnalysis] = {}
    for word in candidates:
        word = canonical_word(word)
        if word not in analyses:
            analyses[word] = analyze(word, pool)
    ranked = sorted(analyses.values(), key=lambda a: -a.distribution_score)
    return ranked[:top_n]


@dataclass(frozen=True)
class GuessComparison:
    """A played guess next to the best-scoring guess for the same pool."""
    filtered_pool_size: int
    user_guess: str
    user_key: str
    user_analysis: GuessAnalysis
    optimal_guess: Optional[str]
    optimal_analysis: Optional[GuessAnalysis]
    optimal_reason: str

    @property
    def user_bins_count(self) -> int:
        return self.user_analysis.bins_count

    @property
    def optimal_bins_count(self) -> Optional[int]:
        return self.optimal_analysis.bins_count if self.optimal_analysis else None

    @property
    def user_avg_bin_size(self) -> float:
        return self.user_analysis.avg_bin_size

    @property
    def optimal_avg_bin_size(self) -> Optional[float]:
        return self.optimal_analysis.avg_bin_size if self.optimal_analysis else None

    @property
    def bins_advantage(self) -> Optional[int]:
        if self.optimal_analysis is None:
            return None
        return self.optimal_analysis.bins_count - self.user_analysis.bins_count

    @property
    def user_score(self) -> float:
        return self.user_analysis.distribution_score

    @property
    def optimal_score(self) -> Optional[float]:
        return self.optimal_analysis.distribution_score if self.optimal_analysis else None


def compare_with_optimal(history: Sequence[Tuple[str, str]], word_list: Sequence[str],
                         max_pool: int = MAX_POOL_FOR_OPTIMAL,
                         max_candidates: int = MAX_OPTIMAL_CANDIDATES) -> GuessComparison:
    """
    Compare the last guess in ``history`` with the best guess available.

    Both are scored against ``word_list`` narrowed by the guesses before the
    last one. The best guess is searched among the narrowed words by
    distribution score; pools over ``max_pool`` words skip the search, and
    only the first ``max_candidates`` words are tried as guesses.
    """
    if not history:
        raise InvalidInputError("Need at least one (guess, key) pair to compare")
    pairs = []
    for item in history:
        try:
            guess, key = item
        except (TypeError, ValueError):
            raise InvalidInputError(f"History entries must be (guess, key) pairs, got {item!r}")
        pairs.append((canonical_word(guess), parse_key(key)))
    user_guess, user_key = pairs[-1]

    pool = apply_guesses(word_list, pairs[:-1])
    user_analysis = analyze(user_guess, pool, user_key)

    optimal_guess = None
    optimal_analysis = None
    if not pool:
        optimal_reason = "No remaining candidates"
    elif len(pool) > max_pool:
        optimal_reason = (f"Optimal guess skipped: {len(pool)} possibilities exceed "
                          f"limit of {max_pool}")
    elif len(pool) == 1:
        optimal_guess = pool[0]
        optimal_analysis = analyze(optimal_guess, pool)
        optimal_reason = "Only one word remaining"
    else:
        candidates = pool[:max_candidates]
        optimal_analysis = rank_guesses(pool, candidates)[0]
        optimal_guess = optimal_analysis.guess
        optimal_reason = f"Optimal distribution with score {optimal_analysis.distribution_score:.2f}"
        if len(candidates) < len(pool):
            optimal_reason += f". Analyzed {len(candidates)} of {len(pool)} candidates"

    return GuessComparison(
        filtered_pool_size=len(pool),
        user_guess=user_guess,
        user_key=user_key,
        user_analysis=user_analysis,
        optimal_guess=optimal_guess,
        optimal_analysis=optimal_analysis,
        optimal_reason=optimal_reason,
    )
