"""
Auto-play a full game against a known answer.

The answer is only known in simulation: each guess chosen by the advisor is
scored against it, the pool is narrowed by the resulting key, and play stops
on GGGGG or after six guesses.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .feedback import canonical_word, evaluate, is_solved
from .strategy import MAX_GUESSES, NO_CANDIDATES, GuessAdvisor, GuessResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepRecord:
    turn: int
    guess: str
    key: str
    pool_before: int
    pool_after: int
    reason: str
    cached: Optional[bool] = None


@dataclass
class GameResult:
    answer: str
    opening_word: str
    solved: bool = False
    total_guesses: int = 0
    steps: List[StepRecord] = field(default_factory=list)
    remaining_words: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def guesses(self) -> List[str]:
        return [s.guess for s in self.steps]

    @property
    def evaluations(self) -> List[str]:
        return [s.key for s in self.steps]


def auto_play(advisor: GuessAdvisor, answer: str, opening_word: Optional[str] = None) -> GameResult:
    """
    Play one game with ``advisor`` until solved or out of guesses.

    If filtering ever leaves no words (the answer is not in the dictionary)
    the game stops with ``error`` set instead of guessing blindly.
    """
    answer = canonical_word(answer)
    opener = canonical_word(opening_word) if opening_word else advisor.opener
    solver = advisor.solver

    game = GameResult(answer=answer, opening_word=opener)
    history: List[GuessResult] = []
    pool = solver.full_pool()

    for turn in range(1, MAX_GUESSES + 1):
        choice = advisor.get_best_guess(history, turn, opener=opener)
        if choice.best_guess is None:
            game.error = choice.error or NO_CANDIDATES
            log.warning("Turn %d: %s", turn, game.error)
            break

        guess = choice.best_guess
        key = evaluate(guess, answer)
        before = len(pool)
        pool = solver.filter_pool(guess, key, pool)

        game.steps.append(StepRecord(turn=turn, guess=guess, key=key, pool_before=before,
                                     pool_after=len(pool), reason=choice.reason,
                                     cached=choice.cached))
        game.total_guesses = turn
        history.append(GuessResult(guess, key))
        log.debug("Turn %d: %s -> %s (%d -> %d) %s", turn, guess, key, before, len(pool),
                  choice.reason)

        if is_solved(key):
            game.solved = True
            game.remaining_words = [answer]
            break

        if len(pool) == 0:
            game.error = NO_CANDIDATES
            log.warning("No remaining words - target %s may not be in word list", answer)
            break
        game.remaining_words = solver.words(pool)

    return game


# ============================================================================
# BENCHMARK
# ============================================================================

def benchmark(advisor: GuessAdvisor, test_words: Optional[Sequence[str]] = None,
              opening_word: Optional[str] = None, verbose: bool = True) -> Dict:
    """
    Auto-play every word in ``test_words`` (default: all answers).

    Failed games count as 7 guesses in the average.
    """
    if test_words is None:
        test_words = advisor.solver.answers

    results = []
    dist = Counter()
    failures = []

    start = time.time()
    for i, word in enumerate(test_words):
        if verbose and i % 100 == 0:
            elapsed = time.time() - start
            rate = (i + 1) / elapsed if elapsed > 0 else 0
            avg = sum(results) / len(results) if results else 0
            print(f"[{i}/{len(test_words)}] {rate:.1f} w/s, avg={avg:.4f}")

        game = auto_play(advisor, word, opening_word)
        n = game.total_guesses if game.solved else MAX_GUESSES + 1
        results.append(n)
        dist[n] += 1
        if not game.solved:
            failures.append(game.answer)

    elapsed = time.time() - start

    return {
        'total': len(test_words),
        'average': sum(results) / len(results) if results else 0.0,
        'distribution': dict(sorted(dist.items())),
        'failures': len(failures),
        'failed_words': failures[:20],
        'time': elapsed,
        'rate': len(test_words) / elapsed if elapsed > 0 else 0.0,
    }


def print_results(results: Dict):
    """Pretty print benchmark results."""
    total = results['total'] or 1
    print("\n" + "=" * 50)
    print("BENCHMARK RESULTS")
    print("=" * 50)
    print(f"Words tested: {results['total']}")
    print(f"Average guesses: {results['average']:.4f}")
    print(f"Failures: {results['failures']} ({100*results['failures']/total:.2f}%)")
    print(f"Time: {results['time']:.1f}s ({results['rate']:.1f} words/sec)")
    print("\nDistribution:")
    for n, count in results['distribution'].items():
        pct = 100 * count / total
        bar = "█" * int(pct / 2)
        print(f"  {n}: {count:5d} ({pct:5.2f}%) {bar}")
    if results['failed_words']:
        print(f"\nFailed words: {results['failed_words']}")
    print("=" * 50)


def print_game(game: GameResult):
    """Pretty print one auto-played game."""
    print("\n" + "=" * 50)
    print(f"Target word: {game.answer}")
    print(f"Starting guess: {game.opening_word}")
    print(f"Result: {'SOLVED' if game.solved else 'FAILED'}")
    print(f"Total guesses: {game.total_guesses}")
    print("\nGuess history:")
    for step in game.steps:
        print(f"  {step.turn}. {step.guess} -> {step.key} "
              f"({step.pool_before} -> {step.pool_after})  {step.reason}")
    if game.error:
        print(f"\nError: {game.error}")
    elif not game.solved and game.remaining_words:
        more = '...' if len(game.remaining_words) > 10 else ''
        print(f"\nFinal remaining words: {', '.join(game.remaining_words[:10])}{more}")
    print("=" * 50)
