"""Seeded pseudo-random stream used for reproducible shuffles.

The recurrence is fixed so results never depend on the platform RNG:

    s[n+1] = sin(s[n]) * 10000
    value  = s[n+1] - floor(s[n+1])

It is not suitable for anything beyond shuffling and toy data generation.
"""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")


class SeededSequence:
    """Infinite stream of floats in [0, 1) fully determined by `seed`."""

    def __init__(self, seed: float):
        self.state = seed

    def random(self) -> float:
        self.state = math.sin(self.state) * 10000
        return self.state - math.floor(self.state)

    def noise(self, scale: float) -> float:
        """Uniform value in [-scale, scale)."""
        return (self.random() - 0.5) * 2 * scale


def seed_shuffle(items: Sequence[T], seed: float) -> list[T]:
    """Return a shuffled copy using a reverse Fisher-Yates walk over the sequence."""
    result = list(items)
    rng = SeededSequence(seed)
    current = len(result)
    while current != 0:
        pick = math.floor(rng.random() * current)
        current -= 1
        result[current], result[pick] = result[pick], result[current]
    return result
