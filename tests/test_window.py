"""
Sequence Window Tests
=====================

Tests for seed validation and drop-oldest/push-newest advancing.
"""

import numpy as np
import pytest

from dance_generator.errors import InvalidSeed, SchedulingFault
from dance_generator.sequence import SequenceWindow


def numbered_seed(length=5, dim=4):
    """Seed whose i-th vector is filled with i."""
    return [[float(i)] * dim for i in range(length)]


class TestSeedValidation:
    """Tests for InvalidSeed conditions."""

    def test_empty_seed(self):
        with pytest.raises(InvalidSeed):
            SequenceWindow([])

    def test_ragged_seed(self):
        with pytest.raises(InvalidSeed):
            SequenceWindow([[0.0, 0.0], [0.0, 0.0, 0.0]])

    def test_zero_width_seed(self):
        with pytest.raises(InvalidSeed):
            SequenceWindow([[], []])

    def test_odd_width_seed(self):
        """A FlatVector holds (x, y) pairs, so D must be even."""
        with pytest.raises(InvalidSeed):
            SequenceWindow([[1.0, 2.0, 3.0]] * 30, window_length=30)

    def test_nested_entry(self):
        with pytest.raises(InvalidSeed):
            SequenceWindow([[[0.0, 0.0]], [[0.0, 0.0]]])

    def test_non_numeric_entry(self):
        with pytest.raises(InvalidSeed):
            SequenceWindow([["a", "b"]])

    def test_wrong_length_for_window(self):
        with pytest.raises(InvalidSeed):
            SequenceWindow(numbered_seed(length=5), window_length=30)

    def test_window_length_from_seed(self, zero_seed):
        """Without an explicit W, the seed length is used."""
        window = SequenceWindow(zero_seed)
        assert window.window_length == 30
        assert window.dim == 58
        assert len(window) == 30


class TestAdvance:
    """Tests for SequenceWindow.advance."""

    def test_length_preserved(self):
        window = SequenceWindow(numbered_seed(), window_length=5)

        for step in range(12):
            window.advance([100.0 + step] * 4)
            assert len(window) == 5
            assert len(window.current()) == 5

    def test_drops_oldest_appends_newest(self):
        window = SequenceWindow(numbered_seed())

        window.advance([9.0] * 4)

        firsts = [v[0] for v in window.current()]
        assert firsts == [1.0, 2.0, 3.0, 4.0, 9.0]

    def test_latest_is_nth_appended(self):
        """After N advances the last entry is the N-th appended vector."""
        window = SequenceWindow(numbered_seed())
        appended = [[50.0 + n] * 4 for n in range(3)]

        for vector in appended:
            window.advance(vector)

        assert np.array_equal(window.current()[-1], appended[-1])
        assert np.array_equal(window.latest(), appended[-1])
        assert window.total_advanced == 3

    def test_seed_prefix_evicted(self):
        """After N >= 1 advances, the first N seed vectors are gone."""
        window = SequenceWindow(numbered_seed())

        window.advance([7.0] * 4)
        window.advance([8.0] * 4)

        firsts = [v[0] for v in window.current()]
        assert 0.0 not in firsts
        assert 1.0 not in firsts
        assert firsts == [2.0, 3.0, 4.0, 7.0, 8.0]

    def test_wrong_dimension_rejected(self):
        window = SequenceWindow(numbered_seed())

        with pytest.raises(SchedulingFault):
            window.advance([1.0, 2.0])

        assert len(window) == 5
        assert window.total_advanced == 0


class TestSnapshots:
    """Tests for read-only access."""

    def test_current_returns_copies(self):
        window = SequenceWindow(numbered_seed())

        snapshot = window.current()
        snapshot[0][:] = -1.0
        snapshot.pop()

        assert window.current()[0][0] == 0.0
        assert len(window) == 5

    def test_seed_not_aliased(self):
        seed = numbered_seed()
        window = SequenceWindow(seed)

        seed[0][0] = 99.0

        assert window.current()[0][0] == 0.0

    def test_as_array_shape(self):
        window = SequenceWindow(numbered_seed(length=6, dim=10))
        assert window.as_array().shape == (6, 10)

    def test_metrics(self):
        window = SequenceWindow(numbered_seed())
        window.advance([1.0] * 4)

        assert window.metrics() == {
            "window_length": 5,
            "dim": 4,
            "total_advanced": 1,
        }
