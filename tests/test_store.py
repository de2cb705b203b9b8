import sqlite3
import threading
from dataclasses import replace

import pytest

from wordle_bins.store import DB_PATH_ENV, CacheEntry, SecondGuessCacheDB


def make_entry(key, count=3, word="MAKER", opener="CRATE"):
    return CacheEntry(initial_guess=opener, evaluation_key=key, filtered_answers_count=count,
                      max_bins=count, best_distribution=0.0, best_word=word,
                      best_word_bins=count, best_word_distribution=0.0)


def test_save_and_load(store):
    entries = {k: make_entry(k) for k in ("-----", "-Y-Y-", "GGGGG")}
    assert store.save_cache("CRATE", entries) == 3
    loaded = store.load_cache("CRATE")
    assert loaded == entries
    assert list(loaded) == ["-----", "-Y-Y-", "GGGGG"]
    assert store.load_entry("CRATE", "-Y-Y-") == entries["-Y-Y-"]
    assert store.load_entry("CRATE", "YYYYY") is None


def test_save_replaces_previous_rows(store):
    store.save_cache("CRATE", {k: make_entry(k) for k in ("-----", "-Y-Y-")})
    store.save_cache("CRATE", {"GGGGG": make_entry("GGGGG", count=1, word="CRATE")})
    loaded = store.load_cache("CRATE")
    assert list(loaded) == ["GGGGG"]
    assert loaded["GGGGG"].best_word == "CRATE"


def test_failed_save_keeps_previous_rows(store):
    store.save_cache("CRATE", {"-----": make_entry("-----")})
    bad = {"-Y-Y-": make_entry("-Y-Y-"), "none": make_entry(None)}
    with pytest.raises(sqlite3.IntegrityError):
        store.save_cache("CRATE", bad)
    assert list(store.load_cache("CRATE")) == ["-----"]


def test_merge_entries(store):
    store.save_cache("CRATE", {"-----": make_entry("-----", count=5)})
    merged = store.merge_entries("CRATE", [make_entry("-----", count=4), make_entry("-Y-Y-")])
    assert merged == 2
    loaded = store.load_cache("CRATE")
    assert loaded["-----"].filtered_answers_count == 4
    assert "-Y-Y-" in loaded


def test_merge_ignores_other_openers(store):
    assert store.merge_entries("CRATE", [make_entry("-----", opener="SLATE")]) == 0
    assert not store.cache_exists("SLATE")


def test_unreachable_entry_round_trips(store):
    entry = replace(make_entry("GGGGY", count=0, word=None), max_bins=0, best_word_bins=0)
    store.merge_entries("CRATE", [entry])
    loaded = store.load_entry("CRATE", "GGGGY")
    assert loaded == entry
    assert not loaded.reachable


def test_exists_delete_and_stats(store):
    empty = store.get_cache_stats()
    assert empty.initial_guesses == 0
    assert empty.total_entries == 0
    assert empty.avg_filtered is None

    store.save_cache("CRATE", {"-----": make_entry("-----", count=4),
                               "GGGGG": make_entry("GGGGG", count=1)})
    store.save_cache("SLATE", {"-----": make_entry("-----", count=7, opener="SLATE")})
    assert store.cache_exists("CRATE")

    stats = store.get_cache_stats()
    assert stats.initial_guesses == 2
    assert stats.total_entries == 3
    assert (stats.min_filtered, stats.max_filtered) == (1, 7)
    assert stats.avg_filtered == pytest.approx(4.0)

    assert store.delete_cache("CRATE") == 2
    assert not store.cache_exists("CRATE")
    assert store.cache_exists("SLATE")


def test_database_path_from_environment(tmp_path, monkeypatch):
    path = str(tmp_path / "cache.db")
    monkeypatch.setenv(DB_PATH_ENV, path)
    with SecondGuessCacheDB() as db:
        assert db.database == path
        db.save_cache("CRATE", {"-----": make_entry("-----")})

    with SecondGuessCacheDB(path) as db:
        assert db.cache_exists("CRATE")


class PausingConnection:
    """Delegates to a connection but stalls bulk inserts until released."""

    def __init__(self, conn):
        self._conn = conn
        self.inserting = threading.Event()
        self.release = threading.Event()

    def executemany(self, *args):
        self.inserting.set()
        self.release.wait(5)
        return self._conn.executemany(*args)

    def __enter__(self):
        return self._conn.__enter__()

    def __exit__(self, *exc):
        return self._conn.__exit__(*exc)

    def __getattr__(self, name):
        return getattr(self._conn, name)


def test_readers_never_see_a_half_rebuilt_cache(store):
    store.save_cache("CRATE", {k: make_entry(k) for k in ("-----", "-Y-Y-")})
    conn = store.conn
    store.conn = PausingConnection(conn)
    rebuilt = {k: make_entry(k) for k in ("-----", "-Y-Y-", "GGGGG")}

    writer = threading.Thread(target=store.save_cache, args=("CRATE", rebuilt))
    writer.start()
    assert store.conn.inserting.wait(5)

    seen = {}

    def read():
        seen["cache"] = store.load_cache("CRATE")
        seen["exists"] = store.cache_exists("CRATE")
        seen["entry"] = store.load_entry("CRATE", "-----")

    reader = threading.Thread(target=read)
    reader.start()
    reader.join(0.2)
    assert reader.is_alive()

    store.conn.release.set()
    writer.join(5)
    reader.join(5)
    store.conn = conn

    assert seen["cache"] == rebuilt
    assert seen["exists"]
    assert seen["entry"] == rebuilt["-----"]
