"""
Mixture Sampler
===============

Draws one next-pose sample from a Gaussian mixture prediction.

Algorithm:
    1. Temperature-normalize component weights
         T == 1: weights used unchanged (no softmax)
         T != 1: softmax(weights / T), max-subtracted for stability
    2. Categorical draw by cumulative sum in index order,
       falling back to the max-weight component on rounding shortfall
    3. Slice the chosen component's mean/stddev at offset index * D
    4. Scale stddevs by T
    5. Per-dimension Box-Muller sample: mean + stddev * z

One temperature drives both the categorical sharpening (1) and the
Gaussian spread (4).

Design Rules:
    - Pure function of inputs and the injected random source
    - Never mutates inputs
    - Raises InvalidDistribution, never returns a partial sample
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from dance_generator.errors import InvalidDistribution


logger = logging.getLogger(__name__)


def normalize_weights(weights: Sequence[float], temperature: float) -> np.ndarray:
    """
    Turn raw component weights into selection probabilities.

    Args:
        weights: Raw weights (logits when temperature != 1)
        temperature: Sampling temperature, > 0

    Returns:
        New array of selection weights
    """
    raw = np.array(weights, dtype=np.float64)
    if temperature == 1.0:
        return raw

    scaled = raw / temperature
    exp = np.exp(scaled - np.max(scaled))
    return exp / np.sum(exp)


def sample_categorical(probs: np.ndarray, u: float) -> int:
    """
    Select an index by cumulative sum against a uniform draw.

    Args:
        probs: Selection weights
        u: Uniform draw in [0, 1)

    Returns:
        First index whose cumulative weight exceeds u, else the
        index of the largest weight.
    """
    cumulative = 0.0
    for index, p in enumerate(probs):
        cumulative += p
        if u < cumulative:
            return index
    return int(np.argmax(probs))


def box_muller(u1: np.ndarray, u2: np.ndarray) -> np.ndarray:
    """Standard normal draws from uniforms in (0, 1]."""
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)


class MixtureSampler:
    """
    Stateless sampler for mixture-density predictions.

    The only state is the random source, which may be seeded
    for reproducible sampling.

    Example:
        sampler = MixtureSampler(rng=np.random.default_rng(7))
        vector = sampler.sample(pi, mu, sigma, dim=66, num_mixtures=5,
                                temperature=0.8)
    """

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        """
        Initialize sampler.

        Args:
            rng: Random source. Defaults to an entropy-seeded generator.
        """
        self._rng = rng if rng is not None else np.random.default_rng()

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def sample(
        self,
        weights: Sequence[float],
        means: Sequence[float],
        stddevs: Sequence[float],
        dim: int,
        num_mixtures: int,
        temperature: float = 1.0,
    ) -> np.ndarray:
        """
        Draw one FlatVector from the mixture.

        Args:
            weights: Component weights, length M
            means: Flattened means, length M*D
            stddevs: Flattened stddevs, length M*D, non-negative
            dim: Output dimensionality D
            num_mixtures: Component count M
            temperature: Sampling temperature, > 0

        Returns:
            New float64 array of length D

        Raises:
            InvalidDistribution: If the parameters are malformed
        """
        w = np.asarray(weights, dtype=np.float64).reshape(-1)
        mu = np.asarray(means, dtype=np.float64).reshape(-1)
        sigma = np.asarray(stddevs, dtype=np.float64).reshape(-1)

        self._validate(w, mu, sigma, dim, num_mixtures, temperature)

        probs = normalize_weights(w, temperature)
        component = self.select_component(probs)

        offset = component * dim
        selected_mu = mu[offset:offset + dim]
        selected_sigma = sigma[offset:offset + dim] * temperature

        # 1 - U[0, 1) lies in (0, 1], keeping log(u1) finite
        u1 = 1.0 - self._rng.random(dim)
        u2 = 1.0 - self._rng.random(dim)
        return selected_mu + selected_sigma * box_muller(u1, u2)

    def select_component(self, probs: np.ndarray) -> int:
        """Draw a component index from normalized weights."""
        return sample_categorical(probs, float(self._rng.random()))

    @staticmethod
    def _validate(
        weights: np.ndarray,
        means: np.ndarray,
        stddevs: np.ndarray,
        dim: int,
        num_mixtures: int,
        temperature: float,
    ) -> None:
        if num_mixtures <= 0:
            raise InvalidDistribution(f"num_mixtures must be positive, got {num_mixtures}")
        if dim <= 0:
            raise InvalidDistribution(f"dim must be positive, got {dim}")
        if not math.isfinite(temperature) or temperature <= 0:
            raise InvalidDistribution(f"temperature must be positive, got {temperature}")
        if weights.size != num_mixtures:
            raise InvalidDistribution(
                f"expected {num_mixtures} weights, got {weights.size}"
            )
        expected = num_mixtures * dim
        if means.size != expected or stddevs.size != expected:
            raise InvalidDistribution(
                f"expected {expected} means/stddevs, got "
                f"{means.size}/{stddevs.size}"
            )
        if not np.all(np.isfinite(means)) or not np.all(np.isfinite(stddevs)):
            raise InvalidDistribution("means and stddevs must be finite")
        if np.any(stddevs < 0):
            raise InvalidDistribution("stddevs must be non-negative")
