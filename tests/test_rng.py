"""
RNG Tests

Determinism, range and persistence checks for the Mulberry32 SeededRng.
"""

import pytest

from packages.wingo.state.rng import MASK32, SeededRng


class TestDeterminism:
    """Same seed, same stream."""

    def test_same_seed_same_sequence(self):
        assert SeededRng(12345).take(20) == SeededRng(12345).take(20)

    def test_different_seeds_diverge(self):
        assert SeededRng(1).take(5) != SeededRng(2).take(5)

    def test_values_in_unit_interval(self, rng_seed_12345):
        for value in rng_seed_12345.take(500):
            assert 0.0 <= value < 1.0

    def test_seed_is_masked_to_32_bits(self):
        assert SeededRng(2 ** 32 + 7).state == 7
        assert SeededRng(-1).state == MASK32
        assert SeededRng(2 ** 32 + 7).take(3) == SeededRng(7).take(3)


class TestDraws:
    """int / pick / shuffle."""

    def test_int_range(self, rng):
        for _ in range(300):
            assert 0 <= rng.int(6) < 6

    def test_int_consumes_one_value(self):
        a = SeededRng(4)
        b = SeededRng(4)
        a.int(100)
        b.next()
        assert a.state == b.state

    def test_pick_returns_member(self, rng):
        options = ("burn", "chill", "ooze")
        for _ in range(20):
            assert rng.pick(options) in options

    def test_pick_empty_raises(self, rng):
        with pytest.raises(IndexError):
            rng.pick([])

    def test_shuffle_is_permutation(self):
        values = list(range(1, 21))
        shuffled = SeededRng(9).shuffle(list(values))
        assert sorted(shuffled) == values
        assert shuffled != values

    def test_shuffle_returns_same_object(self, rng):
        values = [1, 2, 3]
        assert rng.shuffle(values) is values

    def test_shuffle_consumes_len_minus_one(self):
        a = SeededRng(5)
        a.shuffle(list(range(10)))
        b = SeededRng(5)
        b.take(9)
        assert a.state == b.state

    def test_shuffle_is_deterministic(self):
        assert SeededRng(9).shuffle(list(range(30))) == SeededRng(9).shuffle(list(range(30)))


class TestPersistence:
    """serialize / restore / copy."""

    def test_serialize_restore_roundtrip(self, rng):
        rng.take(5)
        saved = rng.serialize()
        expected = rng.take(5)
        rng.restore(saved)
        assert rng.take(5) == expected

    def test_from_state_continues_stream(self, rng):
        rng.take(3)
        clone = SeededRng.from_state(rng.serialize())
        assert clone.take(10) == rng.take(10)

    def test_copy_is_independent(self, rng):
        clone = rng.copy()
        clone.take(4)
        assert clone.state != rng.state
        assert rng.copy().take(4) == SeededRng.from_state(rng.serialize()).take(4)

    def test_serialized_state_is_uint32(self, rng):
        rng.take(100)
        assert 0 <= rng.serialize() <= MASK32
