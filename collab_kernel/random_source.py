"""
Random Source — Seeded random wrapper.

All randomness in community detection passes through a single
RandomSource instance. Identical (seed) → identical call sequence →
identical cluster assignments. ``seed=None`` gives a fresh,
non-reproducible source.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Local RNG. No global random state touched."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def rand_float(self) -> float:
        """Return a float in [0.0, 1.0)."""
        return self._rng.random()

    def rand_int(self, low: int, high: int) -> int:
        """Return random integer in [low, high] inclusive."""
        return self._rng.randint(low, high)

    def rand_choice(self, seq: Sequence[T]) -> T:
        """Pick one element from a non-empty sequence."""
        return self._rng.choice(seq)

    def shuffle(self, seq: List[T]) -> None:
        """In-place shuffle."""
        self._rng.shuffle(seq)
