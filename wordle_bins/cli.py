"""
Command line interface.

Usage:
    wordle-bins play STORK [--opener CRATE]
    wordle-bins suggest --history CRATE:-Y-Y- --turn 2
    wordle-bins build-cache CRATE [--incremental]
    wordle-bins benchmark [--sample 200]
    wordle-bins compare --history CRATE:-Y-Y- STORK:GGGG-
    wordle-bins stats
"""

import argparse
import logging
import random
import sys
from typing import List, Optional

from .autoplay import auto_play, benchmark, print_game, print_results
from .cache import SecondGuessCache
from .errors import WordleError
from .scoring import compare_with_optimal, rank_guesses
from .solver import DEFAULT_ANSWERS_FILE, WordleSolver
from .store import SecondGuessCacheDB
from .strategy import DEFAULT_OPENER, GuessAdvisor, GuessResult


def _parse_history(items: List[str]) -> List[GuessResult]:
    history = []
    for item in items:
        guess, sep, key = item.partition(':')
        if not sep:
            raise WordleError(f"History entries look like GUESS:KEY, got '{item}'")
        history.append(GuessResult(guess, key))
    return history


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordle-bins",
                                     description="Wordle guess recommendations by bin separation")
    parser.add_argument("--answers", default=DEFAULT_ANSWERS_FILE, help="answer word list")
    parser.add_argument("--guesses", default=None, help="allowed guess word list")
    parser.add_argument("--db", default=None,
                        help="second-guess cache database (default: $WORDLE_CACHE_DB)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="auto-play against a known answer")
    play.add_argument("answer")
    play.add_argument("--opener", default=DEFAULT_OPENER)

    suggest = sub.add_parser("suggest", help="best guess for a game in progress")
    suggest.add_argument("--history", nargs="*", default=[], metavar="GUESS:KEY")
    suggest.add_argument("--turn", type=int, default=None,
                         help="turn number (default: one past the history)")
    suggest.add_argument("--top", type=int, default=0,
                         help="also list the top N remaining words by distribution score")

    build = sub.add_parser("build-cache", help="precompute second guesses for an opener")
    build.add_argument("opener")
    build.add_argument("--incremental", action="store_true",
                       help="only compute keys missing from the cache")

    bench = sub.add_parser("benchmark", help="auto-play many answers")
    bench.add_argument("--sample", type=int, default=0, help="random sample size (0 = all)")
    bench.add_argument("--opener", default=DEFAULT_OPENER)
    bench.add_argument("--seed", type=int, default=42)

    compare = sub.add_parser("compare", help="compare the last guess with the best available")
    compare.add_argument("--history", nargs="+", required=True, metavar="GUESS:KEY")

    sub.add_parser("stats", help="second-guess cache statistics")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")

    store = SecondGuessCacheDB(args.db)
    try:
        if args.command == "stats":
            stats = store.get_cache_stats()
            print(f"Initial guesses: {stats.initial_guesses}")
            print(f"Total entries: {stats.total_entries}")
            if stats.total_entries:
                print(f"Filtered answers: min={stats.min_filtered} max={stats.max_filtered} "
                      f"avg={stats.avg_filtered:.1f}")
            return 0

        solver = WordleSolver.from_files(args.answers, args.guesses)
        cache = SecondGuessCache(solver, store)

        if args.command == "build-cache":
            if args.incremental:
                result = cache.build_incremental(args.opener)
            else:
                result = cache.build_full(args.opener)
            reachable = sum(1 for e in result.entries.values() if e.reachable)
            print(f"{result.initial_guess}: {len(result.entries)} keys "
                  f"({reachable} reachable, {result.computed} computed)")
            if result.error:
                print(f"Error: {result.error}")
                return 1
            return 0

        advisor = GuessAdvisor(solver, cache, opener=getattr(args, "opener", DEFAULT_OPENER))

        if args.command == "play":
            game = auto_play(advisor, args.answer, args.opener)
            print_game(game)
            return 0 if game.solved else 1

        if args.command == "suggest":
            history = _parse_history(args.history)
            turn = args.turn or len(history) + 1
            best = advisor.get_best_guess(history, turn)
            if best.best_guess is None:
                print(f"{best.error} ({best.remaining_count} remaining)")
                return 1
            print(f"Turn {turn}: {best.best_guess} - {best.reason}")
            print(f"Remaining: {best.remaining_count}, bins: {best.bins}")
            if args.top:
                remaining = solver.words(solver.apply_history(history))
                for analysis in rank_guesses(remaining, top_n=args.top):
                    print(f"  {analysis.guess}: {analysis.bins_count} bins, "
                          f"score {analysis.distribution_score:.2f}")
            return 0

        if args.command == "compare":
            result = compare_with_optimal(_parse_history(args.history), solver.answers)
            print(f"Pool before {result.user_guess}: {result.filtered_pool_size} words")
            print(f"  Yours:   {result.user_guess} - {result.user_bins_count} bins, "
                  f"score {result.user_score:.2f}")
            if result.optimal_guess is None:
                print(f"  Optimal: {result.optimal_reason}")
            else:
                print(f"  Optimal: {result.optimal_guess} - {result.optimal_bins_count} bins, "
                      f"score {result.optimal_score:.2f} ({result.bins_advantage:+d} bins)")
            return 0

        if args.command == "benchmark":
            words = solver.answers
            if args.sample:
                random.seed(args.seed)
                words = random.sample(words, min(args.sample, len(words)))
            print_results(benchmark(advisor, words, args.opener))
            return 0
    except WordleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
