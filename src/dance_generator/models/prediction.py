"""
Mixture Prediction Model
========================

Typed container for one step of mixture-density model output.

Produced by an InferenceEngine, consumed by MixtureSampler.

Layout:
    weights: (M,)    raw logits or probabilities
    means:   (M*D,)  component means, component-major
    stddevs: (M*D,)  component standard deviations, component-major
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class MixturePrediction:
    """
    Mixture-density prediction for a single time step.

    Arrays are flattened so that component i occupies
    means[i*D:(i+1)*D] and stddevs[i*D:(i+1)*D].

    Attributes:
        weights: Per-component weights (need not sum to 1)
        means: Flattened component means
        stddevs: Flattened component standard deviations
    """

    weights: np.ndarray
    means: np.ndarray
    stddevs: np.ndarray

    @property
    def num_mixtures(self) -> int:
        """Number of mixture components (M)."""
        return int(self.weights.size)

    @property
    def dim(self) -> int:
        """Output dimensionality (D), or 0 if it cannot be derived."""
        if self.num_mixtures == 0 or self.means.size % self.num_mixtures != 0:
            return 0
        return int(self.means.size // self.num_mixtures)

    @classmethod
    def from_arrays(cls, weights, means, stddevs) -> "MixturePrediction":
        """Build a prediction from any array-likes, flattening each one."""
        return cls(
            weights=np.asarray(weights, dtype=np.float64).reshape(-1),
            means=np.asarray(means, dtype=np.float64).reshape(-1),
            stddevs=np.asarray(stddevs, dtype=np.float64).reshape(-1),
        )

    def __repr__(self) -> str:
        return f"MixturePrediction(M={self.num_mixtures}, D={self.dim})"
