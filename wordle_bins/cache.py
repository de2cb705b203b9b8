"""
Second-Guess Cache
==================

For a fixed opening guess, the best follow-up for each of the 243 feedback
keys, so that turn 2 is a lookup instead of a search during live play.

- ``build_full`` recomputes every key and replaces the opener's rows.
- ``build_incremental`` computes only keys missing from the store and merges
  them in batches, so an interrupted build picks up where it stopped.
- ``lookup_or_compute`` serves one key, computing and merging it on a miss.

Keys no dictionary answer can produce are kept with a zero count and no best
word.
"""

import logging
import sqlite3
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .errors import CachePersistError
from .feedback import all_keys, canonical_word, key_to_pattern, parse_key
from .solver import WordleSolver
from .store import CacheEntry, SecondGuessCacheDB

log = logging.getLogger(__name__)


@dataclass
class CacheBuildResult:
    initial_guess: str
    entries: Dict[str, CacheEntry]
    computed: int
    saved: bool
    error: Optional[CachePersistError] = None


@dataclass(frozen=True)
class SecondGuess:
    word: str
    reason: str
    remaining_answers: int
    bins: int
    distribution: float
    cached: bool


class SecondGuessCache:

    def __init__(self, solver: WordleSolver, store: Optional[SecondGuessCacheDB] = None):
        self.solver = solver
        self.store = store

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def _entry_for(self, initial_guess: str, key: str, pool: np.ndarray) -> CacheEntry:
        n = len(pool)
        if n == 0:
            return CacheEntry(initial_guess=initial_guess, evaluation_key=key,
                              filtered_answers_count=0, max_bins=0, best_distribution=0.0,
                              best_word=None, best_word_bins=0, best_word_distribution=0.0)

        choice = self.solver.find_best(pool, include_guesses=True)
        log.debug("%s %s: %d answers -> %s (%s)", initial_guess, key, n, choice.word, choice.reason)
        return CacheEntry(initial_guess=initial_guess, evaluation_key=key,
                          filtered_answers_count=n, max_bins=choice.bins,
                          best_distribution=choice.variance, best_word=choice.word,
                          best_word_bins=choice.bins, best_word_distribution=choice.variance)

    def compute_entry(self, initial_guess: str, key: str) -> CacheEntry:
        initial_guess = canonical_word(initial_guess)
        key = parse_key(key)
        return self._entry_for(initial_guess, key, self.solver.filter_pool(initial_guess, key))

    def _compute_keys(self, initial_guess: str, keys: List[str]):
        """Yield entries for ``keys``, partitioning the dictionary only once."""
        groups = self.solver.partition(initial_guess)
        empty = np.zeros(0, dtype=np.int32)
        start = time.time()
        for index, key in enumerate(keys):
            if index % 10 == 0:
                elapsed = time.time() - start
                rate = index / elapsed if elapsed > 0 else 0
                eta = (len(keys) - index) / rate if rate > 0 else 0
                log.info("Processing key %d/%d: %s (%.1fs elapsed, ETA: %.1fs)",
                         index + 1, len(keys), key, elapsed, eta)
            pool = groups.get(key_to_pattern(key), empty)
            yield self._entry_for(initial_guess, key, pool)
        log.info("Computed %d keys for %s in %.1fs", len(keys), initial_guess, time.time() - start)

    # ------------------------------------------------------------------
    # Builds
    # ------------------------------------------------------------------

    def build_full(self, initial_guess: str) -> CacheBuildResult:
        """Compute all 243 keys and replace the opener's stored rows."""
        initial_guess = canonical_word(initial_guess)
        log.info("Pre-computing second guesses for %s over %d answers",
                 initial_guess, self.solver.n_answers)
        entries = {e.evaluation_key: e for e in self._compute_keys(initial_guess, all_keys())}
        result = CacheBuildResult(initial_guess, entries, computed=len(entries), saved=False)

        if self.store is not None:
            try:
                self.store.save_cache(initial_guess, entries)
                result.saved = True
            except sqlite3.Error as e:
                log.error("Could not save cache for %s: %s", initial_guess, e)
                result.error = CachePersistError(str(e))
        return result

    def build_incremental(self, initial_guess: str, batch_size: int = 25) -> CacheBuildResult:
        """Compute only the keys missing from the store and merge them in."""
        initial_guess = canonical_word(initial_guess)
        existing = self.store.load_cache(initial_guess) if self.store is not None else {}
        missing = [k for k in all_keys() if k not in existing]
        log.info("%s: %d cached keys, %d to compute", initial_guess, len(existing), len(missing))

        entries = dict(existing)
        batch: List[CacheEntry] = []
        error = None

        def flush():
            nonlocal error
            if self.store is not None and batch and error is None:
                try:
                    self.store.merge_entries(initial_guess, batch)
                except sqlite3.Error as e:
                    log.error("Could not merge cache entries for %s: %s", initial_guess, e)
                    error = CachePersistError(str(e))
            batch.clear()

        for entry in self._compute_keys(initial_guess, missing):
            entries[entry.evaluation_key] = entry
            batch.append(entry)
            if len(batch) >= batch_size:
                flush()
        flush()

        saved = self.store is not None and error is None
        return CacheBuildResult(initial_guess, entries, computed=len(missing),
                                saved=saved, error=error)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup_or_compute(self, initial_guess: str, key: str) -> Optional[SecondGuess]:
        """
        Best second guess after ``initial_guess`` scored ``key``.

        Returns None when no dictionary answer produces ``key``.
        """
        initial_guess = canonical_word(initial_guess)
        key = parse_key(key)

        if self.store is not None:
            entry = self.store.load_entry(initial_guess, key)
            if entry is not None:
                return self._recommendation(entry, cached=True)
            log.debug("Pattern %s not cached for %s, computing on demand", key, initial_guess)

        entry = self.compute_entry(initial_guess, key)
        if self.store is not None:
            try:
                self.store.merge_entries(initial_guess, [entry])
            except sqlite3.Error as e:
                log.warning("Could not cache result for %s %s: %s", initial_guess, key, e)
        return self._recommendation(entry, cached=False)

    @staticmethod
    def _recommendation(entry: CacheEntry, cached: bool) -> Optional[SecondGuess]:
        if not entry.reachable:
            return None
        n = entry.filtered_answers_count
        if n == 1:
            reason = "Only one possible answer remains"
        elif entry.best_word_bins == n:
            reason = f"PERFECT SEPARATION: Each of {n} bins contains exactly 1 word"
        else:
            reason = (f"Maximizes bins ({entry.best_word_bins}) with lowest distribution "
                      f"variance ({entry.best_word_distribution:.2f})")
        return SecondGuess(word=entry.best_word, reason=reason, remaining_answers=n,
                           bins=entry.best_word_bins,
                           distribution=entry.best_word_distribution, cached=cached)
