import random

import pytest

from wordle_bins.autoplay import auto_play, benchmark, print_game, print_results
from wordle_bins.cache import SecondGuessCache
from wordle_bins.feedback import CORRECT_KEY
from wordle_bins.solver import WordleSolver
from wordle_bins.strategy import MAX_GUESSES, NO_CANDIDATES, GuessAdvisor

TINY = ["STORK", "STORM", "STORE", "CRATE", "MAKER"]


@pytest.fixture(scope="module")
def tiny_advisor():
    solver = WordleSolver(TINY)
    return GuessAdvisor(solver, SecondGuessCache(solver))


def test_solved_by_opener(tiny_advisor):
    game = auto_play(tiny_advisor, "crate")
    assert game.solved
    assert game.total_guesses == 1
    assert game.guesses == ["CRATE"]
    assert game.evaluations == [CORRECT_KEY]
    assert game.remaining_words == ["CRATE"]
    assert game.error is None


def test_single_word_after_opener(tiny_advisor):
    game = auto_play(tiny_advisor, "STORE")
    assert game.solved
    assert game.guesses == ["CRATE", "STORE"]
    assert game.steps[1].reason == "Only one word left"


def test_custom_opening_word(tiny_advisor):
    game = auto_play(tiny_advisor, "STORM", opening_word="SOUTH")
    assert game.opening_word == "SOUTH"
    assert game.guesses == ["SOUTH", "MAKER", "STORM"]
    assert game.solved


def test_answer_outside_dictionary(tiny_advisor):
    game = auto_play(tiny_advisor, "TOWER")
    assert not game.solved
    assert game.error == NO_CANDIDATES
    assert game.total_guesses == 1
    assert game.steps[0].pool_after == 0


def test_full_game(full_advisor):
    game = auto_play(full_advisor, "TOWER")
    assert game.solved
    assert game.guesses[0] == "CRATE"
    assert game.evaluations[0] == "-Y-YY"
    assert game.guesses[-1] == "TOWER"
    assert game.total_guesses <= MAX_GUESSES

    for before, after in zip(game.steps, game.steps[1:]):
        assert after.pool_before == before.pool_after
        assert after.pool_after <= after.pool_before


def test_sample_solve_rate(full_advisor, full_solver):
    words = random.Random(7).sample(full_solver.answers, 40)
    games = [auto_play(full_advisor, w) for w in words]
    solved = [g for g in games if g.solved]
    assert len(solved) >= 0.9 * len(games)
    for game in games:
        assert game.total_guesses <= MAX_GUESSES
        assert game.error is None


def test_second_guess_comes_from_cache(full_advisor):
    first = auto_play(full_advisor, "BOUND")
    second = auto_play(full_advisor, "BOUND")
    assert first.evaluations[0] == "-----"
    assert first.steps[1].cached is False
    assert second.steps[1].cached is True
    assert second.guesses == first.guesses


def test_benchmark(tiny_advisor, capsys):
    results = benchmark(tiny_advisor, ["CRATE", "STORE", "TOWER"], verbose=False)
    assert results["total"] == 3
    assert results["average"] == pytest.approx(10 / 3)
    assert results["distribution"] == {1: 1, 2: 1, 7: 1}
    assert results["failures"] == 1
    assert results["failed_words"] == ["TOWER"]

    print_results(results)
    out = capsys.readouterr().out
    assert "BENCHMARK RESULTS" in out
    assert "Failed words: ['TOWER']" in out


def test_print_game(tiny_advisor, capsys):
    print_game(auto_play(tiny_advisor, "TOWER"))
    out = capsys.readouterr().out
    assert "Target word: TOWER" in out
    assert "FAILED" in out
    assert NO_CANDIDATES in out
