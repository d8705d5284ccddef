"""
Mixture Sampler Tests
=====================

Tests for temperature normalization, categorical selection and
Gaussian sampling.
"""

import numpy as np
import pytest

from dance_generator.errors import InvalidDistribution
from dance_generator.sampling import (
    MixtureSampler,
    normalize_weights,
    sample_categorical,
)


class ZeroRng:
    """Random source that always returns 0.0."""

    def random(self, size=None):
        if size is None:
            return 0.0
        return np.zeros(size)


class TestNormalizeWeights:
    """Tests for temperature weight normalization."""

    def test_unit_temperature_is_identity(self):
        """T == 1 returns the weights bit-for-bit, without softmax."""
        weights = np.array([0.2, 0.5, 0.9], dtype=np.float64)
        result = normalize_weights(weights, 1.0)

        assert np.array_equal(result, weights)
        assert result.tobytes() == weights.tobytes()
        assert result is not weights

    def test_softmax_sums_to_one(self):
        """T != 1 produces a probability vector."""
        probs = normalize_weights([1.0, 2.0, 3.0], 0.5)
        assert probs.sum() == pytest.approx(1.0)
        assert np.all(probs > 0)

    def test_softmax_is_stable_for_large_logits(self):
        """Max subtraction keeps huge logits finite."""
        probs = normalize_weights([1000.0, 1001.0], 0.9)
        assert np.all(np.isfinite(probs))
        assert probs.sum() == pytest.approx(1.0)

    def test_low_temperature_sharpens(self):
        """T -> 0+ concentrates mass on the max-weight component."""
        probs = normalize_weights([1.0, 2.0, 0.5], 0.01)
        assert probs[1] == pytest.approx(1.0)

    def test_high_temperature_flattens(self):
        """Large T approaches uniform selection."""
        probs = normalize_weights([1.0, 2.0, 0.5], 1000.0)
        assert np.allclose(probs, 1.0 / 3.0, atol=1e-3)

    def test_does_not_mutate_input(self):
        """Input weights are left untouched."""
        weights = np.array([1.0, 2.0])
        normalize_weights(weights, 2.0)
        assert np.array_equal(weights, [1.0, 2.0])


class TestSampleCategorical:
    """Tests for cumulative-sum categorical selection."""

    def test_first_index_exceeding_draw(self):
        """Returns the first index whose cumulative sum exceeds u."""
        probs = np.array([0.25, 0.25, 0.5])
        assert sample_categorical(probs, 0.0) == 0
        assert sample_categorical(probs, 0.3) == 1
        assert sample_categorical(probs, 0.75) == 2

    def test_boundary_goes_to_next_index(self):
        """u equal to a cumulative boundary selects the next component."""
        probs = np.array([0.5, 0.5])
        assert sample_categorical(probs, 0.5) == 1

    def test_falls_back_to_max_weight(self):
        """Short cumulative sum falls back to the largest weight."""
        probs = np.array([0.2, 0.3, 0.1])
        assert sample_categorical(probs, 0.9) == 1

    def test_fallback_picks_first_maximum_on_ties(self):
        """Ties resolve to the lowest index."""
        probs = np.array([0.1, 0.1])
        assert sample_categorical(probs, 0.99) == 0


class TestMixtureSampler:
    """Tests for MixtureSampler.sample."""

    def test_zero_variance_returns_means_exactly(self):
        """M=1, stddev 0, T=1 yields the means vector unchanged."""
        sampler = MixtureSampler(rng=np.random.default_rng(0))
        means = [100.0] * 58

        result = sampler.sample([1.0], means, [0.0] * 58, dim=58, num_mixtures=1)

        assert result.shape == (58,)
        assert np.array_equal(result, np.array(means))

    def test_selects_component_slice(self):
        """The chosen component's D-length slice is used."""
        dim, m = 4, 3
        means = np.repeat([0.0, 10.0, 20.0], dim)
        sampler = MixtureSampler(rng=np.random.default_rng(0))

        result = sampler.sample([0.0, 0.0, 1.0], means, np.zeros(m * dim), dim, m)

        assert np.array_equal(result, [20.0] * dim)

    def test_low_temperature_always_selects_max(self):
        """Near-zero temperature always picks the dominant component."""
        dim, m = 2, 3
        means = np.repeat([0.0, 10.0, 20.0], dim)
        sampler = MixtureSampler(rng=np.random.default_rng(5))

        for _ in range(200):
            result = sampler.sample(
                [0.5, 3.0, 1.0], means, np.zeros(m * dim), dim, m, temperature=0.01
            )
            assert np.array_equal(result, [10.0, 10.0])

    def test_high_temperature_selects_all_components(self):
        """Large temperature spreads selection across components."""
        sampler = MixtureSampler(rng=np.random.default_rng(11))
        probs = normalize_weights([0.5, 3.0, 1.0], 100.0)

        counts = np.bincount(
            [sampler.select_component(probs) for _ in range(3000)],
            minlength=3,
        )
        assert np.all(counts > 800)

    def test_deterministic_with_fixed_seed(self):
        """Same seed, same inputs, same output."""
        args = ([0.3, 0.7], np.arange(8.0), np.full(8, 2.0), 4, 2, 0.8)

        first = MixtureSampler(rng=np.random.default_rng(42)).sample(*args)
        second = MixtureSampler(rng=np.random.default_rng(42)).sample(*args)

        assert np.array_equal(first, second)

    def test_temperature_scales_spread(self):
        """Doubling temperature doubles the deviation from the mean."""
        dim = 16
        means = np.full(dim, 5.0)
        stddevs = np.ones(dim)

        base = MixtureSampler(rng=np.random.default_rng(3)).sample(
            [1.0], means, stddevs, dim, 1, temperature=1.0
        )
        hot = MixtureSampler(rng=np.random.default_rng(3)).sample(
            [1.0], means, stddevs, dim, 1, temperature=2.0
        )

        assert np.allclose(hot - means, 2.0 * (base - means))

    def test_gaussian_statistics(self):
        """Samples follow N(mean, stddev) for a large D."""
        dim = 20000
        sampler = MixtureSampler(rng=np.random.default_rng(99))

        result = sampler.sample([1.0], np.full(dim, 3.0), np.full(dim, 2.0), dim, 1)

        assert result.mean() == pytest.approx(3.0, abs=0.1)
        assert result.std() == pytest.approx(2.0, abs=0.1)

    def test_zero_uniform_draw_is_guarded(self):
        """A zero uniform draw never reaches log(0)."""
        sampler = MixtureSampler(rng=ZeroRng())

        result = sampler.sample([1.0], [7.0, 8.0], [1.0, 1.0], 2, 1)

        assert np.all(np.isfinite(result))
        assert np.array_equal(result, [7.0, 8.0])

    def test_does_not_mutate_inputs(self):
        """Inputs are left untouched."""
        weights = np.array([2.0, 1.0])
        means = np.arange(4.0)
        stddevs = np.ones(4)
        sampler = MixtureSampler(rng=np.random.default_rng(0))

        sampler.sample(weights, means, stddevs, 2, 2, temperature=1.5)

        assert np.array_equal(weights, [2.0, 1.0])
        assert np.array_equal(means, np.arange(4.0))
        assert np.array_equal(stddevs, np.ones(4))


class TestMixtureSamplerErrors:
    """Tests for InvalidDistribution conditions."""

    @pytest.fixture
    def sampler(self):
        return MixtureSampler(rng=np.random.default_rng(0))

    def test_zero_components(self, sampler):
        with pytest.raises(InvalidDistribution):
            sampler.sample([], [], [], dim=2, num_mixtures=0)

    def test_zero_dimension(self, sampler):
        with pytest.raises(InvalidDistribution):
            sampler.sample([1.0], [], [], dim=0, num_mixtures=1)

    def test_negative_stddev(self, sampler):
        with pytest.raises(InvalidDistribution):
            sampler.sample([1.0], [0.0, 0.0], [1.0, -0.1], dim=2, num_mixtures=1)

    def test_mismatched_means(self, sampler):
        with pytest.raises(InvalidDistribution):
            sampler.sample([0.5, 0.5], [0.0] * 3, [1.0] * 4, dim=2, num_mixtures=2)

    def test_mismatched_weights(self, sampler):
        with pytest.raises(InvalidDistribution):
            sampler.sample([1.0], [0.0] * 4, [1.0] * 4, dim=2, num_mixtures=2)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_non_finite_stddev(self, sampler, bad):
        with pytest.raises(InvalidDistribution):
            sampler.sample([1.0], [0.0, 0.0], [1.0, bad], dim=2, num_mixtures=1)

    def test_non_finite_mean(self, sampler):
        with pytest.raises(InvalidDistribution):
            sampler.sample([1.0], [float("nan"), 0.0], [1.0, 1.0], dim=2, num_mixtures=1)

    @pytest.mark.parametrize("temperature", [0.0, -1.0, float("nan")])
    def test_non_positive_temperature(self, sampler, temperature):
        with pytest.raises(InvalidDistribution):
            sampler.sample([1.0], [0.0], [1.0], dim=1, num_mixtures=1,
                           temperature=temperature)
