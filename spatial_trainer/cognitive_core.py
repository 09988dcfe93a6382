from __future__ import annotations

import random
from collections.abc import Callable, MutableSequence, Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


class ProblemGenerator(Protocol):
    """Deterministic generator of puzzles."""

    def next_problem(self, *, difficulty: float) -> "Problem":
        ...


class AnswerScorer(Protocol):
    def score(self, *, problem: "Problem", user_answer: int, raw: str) -> float:
        """Return score in [0.0, 1.0]."""
        ...


@dataclass(frozen=True, slots=True)
class Problem:
    prompt: str
    answer: int
    payload: object | None = None  # structured puzzle data for the rendering layer


@dataclass(frozen=True, slots=True)
class Attempt(Generic[T]):
    """Outcome of a bounded rejection loop.

    ``satisfied`` is False when the attempt budget ran out and ``value`` is the
    last candidate drawn.
    """

    value: T
    satisfied: bool
    attempts: int


def try_n_times(
    attempts: int,
    draw: Callable[[], T],
    accept: Callable[[T], bool],
) -> Attempt[T]:
    """Draw candidates until one is accepted or ``attempts`` are used up."""

    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for n in range(1, attempts + 1):
        value = draw()
        if accept(value):
            return Attempt(value=value, satisfied=True, attempts=n)
    return Attempt(value=value, satisfied=False, attempts=attempts)


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit.

    Every generator takes one of these instead of touching the global
    ``random`` state, so independent puzzle requests never share a stream.
    """

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def randrange(self, n: int) -> int:
        return self._rng.randrange(n)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def sample(self, population: Sequence[T], *, k: int) -> list[T]:
        return self._rng.sample(population, k)

    def shuffle(self, items: MutableSequence[object]) -> None:
        self._rng.shuffle(items)

    def spawn(self) -> SeededRng:
        """Derive an independent child stream (one per puzzle)."""
        return SeededRng(self._rng.getrandbits(63))


def lerp_int(a: int, b: int, t: float) -> int:
    """Linear interpolation in integer space (inclusive bounds)."""

    if t <= 0:
        return a
    if t >= 1:
        return b
    return int(round(a + (b - a) * t))


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)
