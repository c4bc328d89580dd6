"""Tests for the seeded GameRNG."""

import dataclasses

import pytest

from dungeon_gen.core.rng import GameRNG, RNGState


def _draws(rng: GameRNG, n: int = 20) -> list[float]:
    return [rng.uniform01() for _ in range(n)]


class TestSeeding:
    def test_same_seed_same_sequence(self):
        assert _draws(GameRNG(42)) == _draws(GameRNG(42))

    def test_different_seeds_differ(self):
        assert _draws(GameRNG(1)) != _draws(GameRNG(2))

    def test_set_seed_restarts_stream(self):
        rng = GameRNG(5)
        first = _draws(rng)
        rng.set_seed(5)
        assert _draws(rng) == first

    def test_set_seed_updates_seed_property(self):
        rng = GameRNG(5)
        rng.set_seed(99)
        assert rng.seed == 99

    def test_generate_random_seed_is_positive_31_bit(self):
        for _ in range(10):
            seed = GameRNG.generate_random_seed()
            assert 0 <= seed <= 0x7FFFFFFF

    def test_repr(self):
        assert repr(GameRNG(3)) == "GameRNG(seed=3)"


class TestDraws:
    def test_range_is_half_open(self):
        rng = GameRNG(3)
        values = {rng.range(2, 5) for _ in range(500)}
        assert values == {2, 3, 4}

    def test_empty_range_returns_low_without_drawing(self):
        rng = GameRNG(3)
        reference = GameRNG(3)
        assert rng.range(2, 2) == 2
        assert rng.range(4, 1) == 4
        assert _draws(rng) == _draws(reference)

    def test_range_float_bounds(self):
        rng = GameRNG(8)
        for _ in range(500):
            value = rng.range_float(1.5, 2.5)
            assert 1.5 <= value <= 2.5

    def test_uniform01_bounds(self):
        rng = GameRNG(8)
        for _ in range(500):
            assert 0.0 <= rng.uniform01() < 1.0

    def test_chance_extremes(self):
        rng = GameRNG(11)
        assert not any(rng.chance(0.0) for _ in range(200))
        assert all(rng.chance(1.0) for _ in range(200))

    def test_chance_always_consumes_one_draw(self):
        rng = GameRNG(11)
        reference = GameRNG(11)
        rng.chance(0.0)
        rng.chance(1.0)
        reference.uniform01()
        reference.uniform01()
        assert _draws(rng) == _draws(reference)


class TestSnapshots:
    def test_restore_replays_stream(self):
        rng = GameRNG(21)
        _draws(rng, 5)
        state = rng.save_state()
        expected = _draws(rng)
        rng.restore_state(state)
        assert _draws(rng) == expected

    def test_unrelated_draws_do_not_leak_through_restore(self):
        rng = GameRNG(21)
        state = rng.save_state()
        expected = _draws(rng, 3)

        rng.restore_state(state)
        rng.set_seed(1234)
        _draws(rng, 50)  # someone else's random use
        rng.restore_state(state)

        assert _draws(rng, 3) == expected
        assert rng.seed == 21

    def test_state_is_frozen(self):
        state = GameRNG(1).save_state()
        assert isinstance(state, RNGState)
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.seed = 2  # type: ignore[misc]
