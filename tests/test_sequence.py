"""Tests for the seeded sequence generator and shuffle."""

import math

from utils.sequence import SeededSequence, seed_shuffle


class TestSeededSequence:
    """Tests for SeededSequence."""

    def test_values_in_unit_interval(self) -> None:
        rng = SeededSequence(42)
        values = [rng.random() for _ in range(1000)]

        assert all(0.0 <= value < 1.0 for value in values)

    def test_same_seed_same_stream(self) -> None:
        first = SeededSequence(7)
        second = SeededSequence(7)

        assert [first.random() for _ in range(50)] == [second.random() for _ in range(50)]

    def test_follows_documented_recurrence(self) -> None:
        state = math.sin(3) * 10000
        expected = state - math.floor(state)

        assert SeededSequence(3).random() == expected

    def test_noise_is_symmetric_range(self) -> None:
        rng = SeededSequence(11)
        values = [rng.noise(0.5) for _ in range(500)]

        assert all(-0.5 <= value < 0.5 for value in values)


class TestSeedShuffle:
    """Tests for seed_shuffle."""

    def test_is_permutation(self) -> None:
        items = list(range(100))

        shuffled = seed_shuffle(items, 42)

        assert sorted(shuffled) == items
        assert items == list(range(100))

    def test_reproducible(self) -> None:
        assert seed_shuffle(range(30), 5) == seed_shuffle(range(30), 5)

    def test_different_seeds_differ(self) -> None:
        assert seed_shuffle(range(50), 42) != seed_shuffle(range(50), 1337)

    def test_zero_seed_always_picks_first(self) -> None:
        # sin(0) == 0, so every draw is 0 and each step swaps with index 0
        assert seed_shuffle([0, 1, 2, 3], 0) == [1, 2, 3, 0]

    def test_empty(self) -> None:
        assert seed_shuffle([], 1) == []
