"""
Signals Module
==============

Temporal signal processing applied to sampled poses.

Components:
    - TemporalSmoother: Exponentially-weighted, missing-aware pose smoothing
"""

from dance_generator.signals.smoother import TemporalSmoother

__all__ = [
    "TemporalSmoother",
]
