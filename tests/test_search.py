import numpy as np
import pytest

from wordle_bins.bins import bin_counts, solution_guaranteed
from wordle_bins.errors import EmptyPoolError, WordleError
from wordle_bins.scoring import bin_variance
from wordle_bins.search import (
    SOURCE_DICTIONARY,
    SOURCE_POOL,
    choose_from_matrix,
    find_best,
    get_partition_sizes,
    scan_partitions,
)
from wordle_bins.solver import WordleSolver

STOR = ["STORK", "STORM", "STORE"]
ATCH = ["BATCH", "CATCH", "HATCH", "LATCH", "MATCH", "PATCH", "WATCH"]


def test_empty_pool_raises():
    with pytest.raises(EmptyPoolError):
        find_best([])


def test_single_word():
    choice = find_best(["stork"])
    assert choice.word == "STORK"
    assert choice.bins == 1
    assert choice.reason == "Only one word left"


def test_two_words():
    choice = find_best(["STORK", "STORM"], ["MAKER"])
    assert choice.word == "STORK"
    assert choice.bins == 2
    assert choice.perfect


def test_duplicates_collapse_before_shortcuts():
    assert find_best(["STORK", "stork", "STORM"]).bins == 2


def test_perfect_separation_from_candidates():
    choice = find_best(STOR, ["CRATE", "MAKER"])
    assert choice.word == "MAKER"
    assert choice.perfect
    assert choice.bins == 3
    assert choice.source == SOURCE_DICTIONARY
    assert choice.reason.startswith("PERFECT SEPARATION (full word list)")


def test_pool_only_search_breaks_ties_by_order():
    choice = find_best(STOR)
    assert choice.word == "STORK"
    assert choice.bins == 2
    assert choice.bin_sizes == [2, 1]
    assert choice.variance == pytest.approx(0.25)
    assert not choice.perfect
    assert choice.source == SOURCE_POOL
    assert choice.reason == "Maximizes bins (2) with optimal distribution variance (0.25)"


def test_pool_member_perfect_separation_wins_first():
    choice = find_best(["CRATE", "TOWER", "STORK"], ["MAKER"])
    assert choice.word == "CRATE"
    assert choice.perfect
    assert choice.source == SOURCE_POOL


def test_matches_brute_force(small_words):
    choice = find_best(ATCH, small_words)
    candidates = list(dict.fromkeys(ATCH + small_words))
    counts = {w: bin_counts(w, ATCH) for w in candidates}
    max_bins = max(len(c) for c in counts.values())
    min_variance = min(bin_variance(list(c.values()))
                       for c in counts.values() if len(c) == max_bins)

    assert choice.bins == max_bins
    assert len(counts[choice.word]) == max_bins
    if choice.perfect:
        assert max_bins == len(ATCH)
        assert solution_guaranteed(choice.word, ATCH)
    else:
        assert choice.variance == pytest.approx(min_variance)


def test_perfect_choice_is_first_perfect_candidate(small_words):
    pool = ["CRANE", "CRATE", "TRACE", "REACT", "TRADE"]
    choice = find_best(pool, small_words)
    order = list(dict.fromkeys(pool + small_words))
    perfect = [w for w in order if solution_guaranteed(w, pool)]
    if perfect:
        assert choice.perfect
        assert choice.word == perfect[0]
    else:
        assert not choice.perfect


def test_solver_agrees_with_word_search(small_solver, small_words):
    pool = np.array(sorted(small_solver.answer_to_idx[w] for w in ATCH), dtype=np.int32)
    words = small_solver.words(pool)

    by_words = find_best(words, small_words)
    by_index = small_solver.find_best(pool, include_guesses=True)
    assert by_index.word == by_words.word
    assert by_index.bins == by_words.bins
    assert by_index.perfect == by_words.perfect
    assert by_index.variance == pytest.approx(by_words.variance)

    pool_only = small_solver.find_best(pool, include_guesses=False)
    assert pool_only.word in words


def test_solver_searches_off_pool_guesses():
    solver = WordleSolver(STOR + ["CRATE", "MAKER"])
    pool = np.array([solver.answer_to_idx[w] for w in STOR], dtype=np.int32)
    assert solver.find_best(pool, include_guesses=True).word == "MAKER"
    assert solver.find_best(pool, include_guesses=False).word == "STORK"


def test_scan_partitions():
    matrix = np.array([[0, 0, 1], [0, 1, 2], [5, 5, 5]], dtype=np.uint8)
    row, bins, variance, perfect = scan_partitions(matrix)
    assert (row, bins, perfect) == (1, 3, True)
    assert variance == 0.0

    row, bins, variance, perfect = scan_partitions(matrix[[0, 2]])
    assert (row, bins, perfect) == (0, 2, False)
    assert variance == pytest.approx(0.25)

    row, _, _, _ = scan_partitions(np.zeros((0, 3), dtype=np.uint8))
    assert row == -1


def test_get_partition_sizes():
    sizes = get_partition_sizes(np.array([0, 0, 242, 7], dtype=np.uint8))
    assert sizes.shape == (243,)
    assert sizes[0] == 2 and sizes[242] == 1 and sizes[7] == 1
    assert sizes.sum() == 4


def test_choose_from_matrix_errors():
    with pytest.raises(EmptyPoolError):
        choose_from_matrix(np.zeros((2, 0), dtype=np.uint8), ["CRATE", "TOWER"], 0)
    with pytest.raises(WordleError):
        choose_from_matrix(np.zeros((0, 3), dtype=np.uint8), [], 0)
