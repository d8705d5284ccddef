"""
Inference Engine
================

Inference abstraction for the generation loop.

This module provides the InferenceEngine protocol and the
MockInferenceEngine implementation, which produces plausible mixture
predictions WITHOUT a model file.

Design Rules:
    - Takes the current window (W FlatVectors, oldest first)
    - Returns a MixturePrediction with weights, means and stddevs
    - Mock output is deterministic for a given step count and window
"""

import asyncio
import logging
import math
from typing import Protocol, Sequence

import numpy as np

from dance_generator.models.pose import missing_mask
from dance_generator.models.prediction import MixturePrediction


logger = logging.getLogger(__name__)


class InferenceEngine(Protocol):
    """
    Protocol for inference backends.

    All implementations must provide an async `predict` method that takes
    the window contents and returns a MixturePrediction.

    This interface is implemented by:
        - MockInferenceEngine (testing, demos)
        - OnnxInferenceEngine (pretrained model)
    """

    async def predict(self, window: Sequence[np.ndarray]) -> MixturePrediction:
        """
        Predict the next-step mixture distribution.

        Args:
            window: W FlatVectors of dimensionality D, oldest first

        Returns:
            MixturePrediction with M components of dimensionality D
        """
        ...


class MockInferenceEngine:
    """
    Deterministic mock inference engine.

    Each component mean is the latest pose in the window displaced by a
    slow sinusoidal sway, with a different phase per component. This
    simulates:
        - Side-to-side sway (x) and bounce (y) over period_steps
        - Mixture components that disagree, so selection matters
        - Missing keypoints that stay missing (zero mean, zero stddev)

    Weights are returned as probabilities, favoring component 0.

    Attributes:
        num_mixtures: Number of components (M)
        amplitude: Sway amplitude in pixels
        period_steps: Steps per sway cycle
        stddev: Component standard deviation for present keypoints
        latency_ms: Simulated inference latency
    """

    def __init__(
        self,
        num_mixtures: int = 3,
        amplitude: float = 6.0,
        period_steps: int = 60,
        stddev: float = 1.5,
        latency_ms: float = 0.0,
    ) -> None:
        """
        Initialize mock inference engine.

        Args:
            num_mixtures: Components per prediction
            amplitude: Max displacement per cycle in pixels
            period_steps: Steps for one complete sway cycle
            stddev: Standard deviation for present keypoints
            latency_ms: Delay before each prediction returns
        """
        if num_mixtures < 1:
            raise ValueError("num_mixtures must be >= 1")
        if period_steps < 1:
            raise ValueError("period_steps must be >= 1")

        self.num_mixtures = num_mixtures
        self.amplitude = amplitude
        self.period_steps = period_steps
        self.stddev = stddev
        self.latency_ms = latency_ms

        self._call_count: int = 0

        logger.info(
            f"MockInferenceEngine initialized: M={num_mixtures}, "
            f"amplitude={amplitude}px, period={period_steps} steps"
        )

    @property
    def call_count(self) -> int:
        """Number of predictions served."""
        return self._call_count

    async def predict(self, window: Sequence[np.ndarray]) -> MixturePrediction:
        """
        Generate a deterministic mixture prediction from the window.

        Args:
            window: Current window contents

        Returns:
            MixturePrediction centred on the latest pose
        """
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)

        latest = np.asarray(window[-1], dtype=np.float64).reshape(-1)
        points = latest.reshape(-1, 2)
        present = ~missing_mask(points)

        step = self._call_count
        self._call_count += 1

        means = []
        stddevs = []
        for component in range(self.num_mixtures):
            # Sway velocity: the derivative of a sinusoid keeps the
            # figure oscillating around its seed position
            phase = 2 * math.pi * step / self.period_steps
            phase += component * math.pi / self.num_mixtures
            velocity = 2 * math.pi / self.period_steps * self.amplitude
            dx = velocity * math.cos(phase)
            dy = 0.5 * velocity * math.sin(2 * phase)

            mean = points.copy()
            mean[present] += (dx, dy)
            sigma = np.zeros_like(points)
            sigma[present] = self.stddev

            means.append(mean.reshape(-1))
            stddevs.append(sigma.reshape(-1))

        raw = np.arange(self.num_mixtures, 0, -1, dtype=np.float64)
        weights = raw / raw.sum()

        return MixturePrediction.from_arrays(
            weights=weights,
            means=np.concatenate(means),
            stddevs=np.concatenate(stddevs),
        )
