"""Seeded random number generator for reproducible instances."""
from __future__ import annotations

import random


class SeededRNG:
    """Seeded source of the swap indices used by the preference shuffle."""

    def __init__(self, seed: int):
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        """Draw one swap index, both bounds included."""
        return self._rng.randint(a, b)

    def fork(self) -> SeededRNG:
        """Derive an independent RNG for one instance of a repeated run.

        The child seed is drawn from this generator, so the sequence of
        instance seeds is fixed by the root seed.
        """
        child_seed = self._rng.randint(0, 2**31 - 1)
        return SeededRNG(child_seed)
