"""
Wordle Bins - Guess Recommendations by Bin Separation
=====================================================

Scores a guess by how many feedback bins it splits the remaining words into,
searches for the guess with the most (evenly sized) bins, and caches the best
second guess for every first-guess key of an opener.
"""

__version__ = "1.0.0"

from .errors import WordleError, InvalidInputError, EmptyPoolError, CachePersistError
from .feedback import evaluate, canonical_key, canonical_word, parse_key, all_keys
from .bins import bin_counts, bin_members, bin_sizes, filter_pool, apply_guesses
from .scoring import (GuessAnalysis, GuessComparison, analyze, compare_with_optimal,
                      score_bin_distribution, rank_guesses)
from .search import GuessChoice, find_best
from .solver import WordleSolver, load_words
from .store import CacheEntry, SecondGuessCacheDB
from .cache import SecondGuessCache, SecondGuess, CacheBuildResult
from .strategy import GuessAdvisor, GuessResult, BestGuess, DEFAULT_OPENER, MAX_GUESSES
from .autoplay import GameResult, StepRecord, auto_play, benchmark, print_results
