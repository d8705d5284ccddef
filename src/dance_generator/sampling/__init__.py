"""
Sampling Module
===============

Mixture-density sampling under a temperature control.

Components:
    - MixtureSampler: One next-pose sample per prediction
    - normalize_weights: Temperature softmax (no-op at T == 1)
    - sample_categorical: Cumulative-sum draw with max-weight fallback
"""

from dance_generator.sampling.mixture import (
    MixtureSampler,
    box_muller,
    normalize_weights,
    sample_categorical,
)

__all__ = [
    "MixtureSampler",
    "box_muller",
    "normalize_weights",
    "sample_categorical",
]
