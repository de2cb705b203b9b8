"""
Persistence for the second-guess cache.

One row per (initial_guess, evaluation_key). A full rebuild replaces every
row of an opener in a single transaction; merges upsert only the keys they
carry. Reads and writes through one store share a lock, so a reader never
sees an opener between the delete and the insert of a rebuild.
"""

import logging
import os
import sqlite3
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

log = logging.getLogger(__name__)

DEFAULT_DB_PATH = "second_guess_cache.db"
DB_PATH_ENV = "WORDLE_CACHE_DB"

SCHEMA = """
CREATE TABLE IF NOT EXISTS second_guess_cache (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    initial_guess VARCHAR(5) NOT NULL,
    evaluation_key VARCHAR(5) NOT NULL,
    filtered_answers_count INTEGER NOT NULL,
    max_bins INTEGER NOT NULL,
    best_distribution FLOAT NOT NULL,
    best_word VARCHAR(5),
    best_word_bins INTEGER NOT NULL,
    best_word_distribution FLOAT NOT NULL,
    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CONSTRAINT second_guess_cache_initial_guess_evaluation_key_unique
        UNIQUE (initial_guess, evaluation_key)
);
CREATE INDEX IF NOT EXISTS second_guess_cache_initial_guess_index
    ON second_guess_cache (initial_guess);
"""

COLUMNS = (
    "initial_guess",
    "evaluation_key",
    "filtered_answers_count",
    "max_bins",
    "best_distribution",
    "best_word",
    "best_word_bins",
    "best_word_distribution",
)

_INSERT = (
    f"INSERT INTO second_guess_cache ({', '.join(COLUMNS)}) "
    f"VALUES ({', '.join('?' * len(COLUMNS))})"
)

_UPSERT = _INSERT + (
    " ON CONFLICT (initial_guess, evaluation_key) DO UPDATE SET "
    + ", ".join(f"{c} = excluded.{c}" for c in COLUMNS[2:])
    + ", updated_at = CURRENT_TIMESTAMP"
)


@dataclass(frozen=True)
class CacheEntry:
    """Best follow-up guess for one opener and one first-guess key."""
    initial_guess: str
    evaluation_key: str
    filtered_answers_count: int
    max_bins: int
    best_distribution: float
    best_word: Optional[str]
    best_word_bins: int
    best_word_distribution: float

    @property
    def reachable(self) -> bool:
        return self.filtered_answers_count > 0 and self.best_word is not None

    def as_row(self) -> tuple:
        return tuple(getattr(self, c) for c in COLUMNS)


@dataclass(frozen=True)
class CacheStats:
    initial_guesses: int
    total_entries: int
    min_filtered: Optional[int]
    max_filtered: Optional[int]
    avg_filtered: Optional[float]


class SecondGuessCacheDB:
    """sqlite3-backed second_guess_cache table."""

    def __init__(self, database: Optional[str] = None):
        """
        Args:
            database: sqlite path or ":memory:"; defaults to $WORDLE_CACHE_DB,
                then second_guess_cache.db in the working directory
        """
        if database is None:
            database = os.environ.get(DB_PATH_ENV, DEFAULT_DB_PATH)
        self.database = database
        self.conn = sqlite3.connect(database, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self.conn.executescript(SCHEMA)

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def save_cache(self, initial_guess: str, entries: Dict[str, CacheEntry]) -> int:
        """Replace all rows for ``initial_guess``; all or nothing."""
        rows = [e.as_row() for e in entries.values()]
        with self._lock, self.conn:
            self.conn.execute(
                "DELETE FROM second_guess_cache WHERE initial_guess = ?", (initial_guess,))
            if rows:
                self.conn.executemany(_INSERT, rows)
        log.info("Saved %d cache entries for initial guess %s", len(rows), initial_guess)
        return len(rows)

    def merge_entries(self, initial_guess: str, entries: Iterable[CacheEntry]) -> int:
        """Insert or replace the given keys only; other rows are untouched."""
        rows = [e.as_row() for e in entries if e.initial_guess == initial_guess]
        if not rows:
            return 0
        with self._lock, self.conn:
            self.conn.executemany(_UPSERT, rows)
        log.debug("Merged %d cache entries for initial guess %s", len(rows), initial_guess)
        return len(rows)

    def load_cache(self, initial_guess: str) -> Dict[str, CacheEntry]:
        with self._lock:
            rows = self.conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM second_guess_cache "
                "WHERE initial_guess = ? ORDER BY id", (initial_guess,)).fetchall()
        return {row["evaluation_key"]: _entry(row) for row in rows}

    def load_entry(self, initial_guess: str, evaluation_key: str) -> Optional[CacheEntry]:
        with self._lock:
            row = self.conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM second_guess_cache "
                "WHERE initial_guess = ? AND evaluation_key = ?",
                (initial_guess, evaluation_key)).fetchone()
        return _entry(row) if row is not None else None

    def cache_exists(self, initial_guess: str) -> bool:
        with self._lock:
            (count,) = self.conn.execute(
                "SELECT COUNT(*) FROM second_guess_cache WHERE initial_guess = ?",
                (initial_guess,)).fetchone()
        log.debug("Checking cache for %s: count=%d", initial_guess, count)
        return count > 0

    def delete_cache(self, initial_guess: str) -> int:
        with self._lock, self.conn:
            cursor = self.conn.execute(
                "DELETE FROM second_guess_cache WHERE initial_guess = ?", (initial_guess,))
        log.info("Deleted %d entries for %s", cursor.rowcount, initial_guess)
        return cursor.rowcount

    def get_cache_stats(self) -> CacheStats:
        with self._lock:
            row = self.conn.execute(
                "SELECT COUNT(DISTINCT initial_guess), COUNT(*), "
                "MIN(filtered_answers_count), MAX(filtered_answers_count), "
                "AVG(filtered_answers_count) FROM second_guess_cache").fetchone()
        return CacheStats(*row)


def _entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(
        initial_guess=row["initial_guess"],
        evaluation_key=row["evaluation_key"],
        filtered_answers_count=row["filtered_answers_count"],
        max_bins=row["max_bins"],
        best_distribution=float(row["best_distribution"]),
        best_word=row["best_word"],
        best_word_bins=row["best_word_bins"],
        best_word_distribution=float(row["best_word_distribution"]),
    )
