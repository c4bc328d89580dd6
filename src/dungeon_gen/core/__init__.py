"""Core primitives shared by the dungeon generator."""

from dungeon_gen.core.rng import GameRNG, RNGState

__all__ = [
    "GameRNG",
    "RNGState",
]
