"""Seeded random number generator for deterministic dungeon generation.

Wraps Python's random.Random to provide reproducible randomness.  The
graph builder and the room selector draw from one explicit ``GameRNG``
handle, so a fixed seed and fixed rules always produce the same layout.
Callers that need to interleave unrelated random use can snapshot the
stream with :meth:`GameRNG.save_state` and put it back with
:meth:`GameRNG.restore_state`.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any

# Seeds are kept in the positive 31-bit range so they survive round trips
# through save files and tools that store them as signed ints.
_SEED_MASK = 0x7FFFFFFF


@dataclass(frozen=True)
class RNGState:
    """Immutable snapshot of a :class:`GameRNG` stream position."""

    seed: int
    internal: tuple[Any, ...]


class GameRNG:
    """Deterministic RNG that can be re-seeded and snapshotted.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    # -- seeding -------------------------------------------------------------

    @property
    def seed(self) -> int:
        """Return the seed the stream was last initialised with."""
        return self._seed

    def set_seed(self, seed: int) -> None:
        """Re-initialise the stream from *seed*."""
        self._seed = seed
        self._rng.seed(seed)

    @staticmethod
    def generate_random_seed() -> int:
        """Return a fresh time-derived seed for runs that did not supply one."""
        return time.time_ns() & _SEED_MASK

    # -- core random methods -------------------------------------------------

    def range(self, low: int, high: int) -> int:
        """Return a random integer *N* such that ``low <= N < high``.

        An empty range (``high <= low``) returns *low* without consuming
        a draw.
        """
        if high <= low:
            return low
        return self._rng.randrange(low, high)

    def range_float(self, low: float, high: float) -> float:
        """Return a random float in the closed interval ``[low, high]``."""
        return self._rng.uniform(low, high)

    def uniform01(self) -> float:
        """Return a random float in the half-open interval ``[0.0, 1.0)``."""
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """Return ``True`` with the given *probability*.

        Always consumes exactly one draw, so the stream position does not
        depend on the probability value.
        """
        return self._rng.random() < probability

    # -- snapshots -----------------------------------------------------------

    def save_state(self) -> RNGState:
        """Capture the current seed and stream position."""
        return RNGState(seed=self._seed, internal=self._rng.getstate())

    def restore_state(self, state: RNGState) -> None:
        """Reinstate a snapshot taken with :meth:`save_state`."""
        self._seed = state.seed
        self._rng.setstate(state.internal)

    # -- dunder helpers ------------------------------------------------------

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
