import pytest

from wordle_bins.cache import SecondGuessCache
from wordle_bins.solver import WordleSolver
from wordle_bins.store import SecondGuessCacheDB
from wordle_bins.strategy import GuessAdvisor

SMALL_WORDS = [
    "ABBEY", "ABIDE", "ALLOY", "BATCH", "BOUND", "CATCH", "CHESS", "CRANE",
    "CRATE", "CREEP", "EERIE", "FLOOR", "HATCH", "HELLO", "LATCH", "LLAMA",
    "LOYAL", "MAKER", "MATCH", "PATCH", "PLUMB", "REACT", "ROBOT", "SASSY",
    "SLATE", "SOUTH", "SPARE", "SPEED", "STORE", "STORK", "STORM", "STORY",
    "THERE", "TOWER", "TRACE", "TRADE", "WATCH", "WHALE", "WORLD", "YIELD",
]


@pytest.fixture(scope="session")
def small_words():
    return list(SMALL_WORDS)


@pytest.fixture(scope="session")
def small_solver():
    return WordleSolver(SMALL_WORDS)


@pytest.fixture(scope="session")
def full_solver():
    return WordleSolver.from_files()


@pytest.fixture
def store():
    db = SecondGuessCacheDB(":memory:")
    yield db
    db.close()


@pytest.fixture
def small_cache(small_solver, store):
    return SecondGuessCache(small_solver, store)


@pytest.fixture
def full_advisor(full_solver, store):
    return GuessAdvisor(full_solver, SecondGuessCache(full_solver, store))
