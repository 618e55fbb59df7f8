"""
Words - The reference vocabulary and the runtime queue drawn from it.

WORD_POOL is never mutated. A WordQueue is a shuffled working copy that
the game session pops from; refilling always builds a fresh copy.
"""

from __future__ import annotations
import random


WORD_POOL: tuple[str, ...] = (
    "queen",
    "dog",
    "basketball",
    "cat",
    "change",
    "snail",
    "soup",
    "calendar",
    "sad",
    "desk",
    "guitar",
    "home",
    "railway",
    "zebra",
    "jelly",
    "car",
    "crow",
    "trade",
    "bag",
    "roll",
    "bubble",
)


class WordQueue:
    """
    Shuffled queue of words. The front of the queue is the next word.

    Usage:
        queue = WordQueue(WORD_POOL, rng=random.Random(7))
        queue.refill()
        word = queue.pop()
    """

    def __init__(self, pool: tuple[str, ...] | list[str] = WORD_POOL, rng: random.Random | None = None):
        if not pool:
            raise ValueError("Word pool is empty")
        self._pool = tuple(pool)
        self._rng = rng or random.Random()
        self._words: list[str] = []
        self.refills = 0

    @property
    def pool(self) -> tuple[str, ...]:
        return self._pool

    def __len__(self) -> int:
        return len(self._words)

    @property
    def is_empty(self) -> bool:
        return not self._words

    def refill(self) -> None:
        """Replace the queue with a freshly shuffled copy of the pool."""
        words = list(self._pool)
        self._rng.shuffle(words)
        self._words = words
        self.refills += 1

    def pop(self) -> str:
        """Remove and return the front word. Raises IndexError when empty."""
        if not self._words:
            raise IndexError("pop from empty word queue")
        return self._words.pop(0)

    def peek(self) -> str | None:
        return self._words[0] if self._words else None
