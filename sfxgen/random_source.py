"""sfxgen Random Source — the one stateful input to generation.

Everything random (noise tables, archetype heuristics, mutation) goes
through an explicit ``RandomSource`` passed by the caller. Two callers
that need to run at the same time must each hold their own instance.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    """Seedable bounded-integer generator."""

    def next(self, range_: int) -> int:
        """Uniform integer in ``[0, range_)``."""
        ...

    def seed(self, value: int) -> None:
        ...


class NumpyRandomSource:
    """RandomSource backed by numpy's PCG64 bit generator."""

    def __init__(self, seed: int | None = None) -> None:
        self._gen = np.random.Generator(np.random.PCG64(seed))

    def next(self, range_: int) -> int:
        if range_ <= 1:
            return 0
        return int(self._gen.integers(0, range_))

    def seed(self, value: int) -> None:
        self._gen = np.random.Generator(np.random.PCG64(value & 0xFFFFFFFF))


def default_random_source(seed: int | None = None) -> RandomSource:
    return NumpyRandomSource(seed)


# ── sfxr helpers ─────────────────────────────────────────


def frnd(rng: RandomSource, range_: float) -> float:
    """Float in [0, range_], both ends inclusive."""
    return rng.next(10001) / 10000.0 * range_


def rnd_np1(rng: RandomSource) -> float:
    """Float in [-1, 1], both ends inclusive."""
    return rng.next(20001) / 10000.0 - 1.0
