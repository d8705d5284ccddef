"""
Sequence Window
===============

Fixed-length sliding window of FlatVectors fed back as model input.

This module provides the SequenceWindow class, which sits between the
sampler and the inference engine in the autoregressive loop.

Design Rules:
    - Length is exactly W from construction onwards
    - advance() drops the oldest entry and appends the newest
    - All entries share one dimensionality D
    - current() hands out copies; callers cannot mutate the window
"""

import logging
from collections import deque
from typing import List, Optional, Sequence

import numpy as np

from dance_generator.errors import InvalidSeed, SchedulingFault


logger = logging.getLogger(__name__)


class SequenceWindow:
    """
    Sliding window of the W most recent FlatVectors, oldest first.

    Attributes:
        window_length: Number of entries (W)
        dim: Dimensionality of each entry (D)
        total_advanced: Number of vectors appended since construction

    Example:
        window = SequenceWindow(seed, window_length=30)

        prediction = await engine.predict(window.current())
        window.advance(sampler.sample(...))
    """

    def __init__(
        self,
        seed: Sequence[Sequence[float]],
        window_length: Optional[int] = None,
    ) -> None:
        """
        Initialize window from a seed sequence.

        Args:
            seed: Initial FlatVectors, oldest first
            window_length: Expected W. If None, W is taken from the seed.

        Raises:
            InvalidSeed: If the seed is empty, ragged, zero-width, odd-width,
                or does not hold window_length entries
        """
        vectors = self._validate_seed(seed, window_length)

        self._window_length = len(vectors)
        self._dim = int(vectors[0].size)
        self._entries: deque = deque(vectors, maxlen=self._window_length)
        self._total_advanced: int = 0

        logger.debug(
            f"SequenceWindow initialized: W={self._window_length}, D={self._dim}"
        )

    @staticmethod
    def _validate_seed(
        seed: Sequence[Sequence[float]],
        window_length: Optional[int],
    ) -> List[np.ndarray]:
        if seed is None or len(seed) == 0:
            raise InvalidSeed("seed sequence is empty")

        try:
            vectors = [np.array(v, dtype=np.float64) for v in seed]
        except (TypeError, ValueError) as e:
            raise InvalidSeed(f"seed contains non-numeric data: {e}") from e

        dim = vectors[0].size
        for index, vector in enumerate(vectors):
            if vector.ndim != 1:
                raise InvalidSeed(f"seed entry {index} is not a flat vector")
            if vector.size != dim:
                raise InvalidSeed(
                    f"seed is not rectangular: entry {index} has {vector.size} "
                    f"values, expected {dim}"
                )
        if dim == 0:
            raise InvalidSeed("seed vectors have zero dimensionality")
        if dim % 2 != 0:
            raise InvalidSeed(
                f"seed vectors have odd dimensionality {dim}, expected (x, y) pairs"
            )

        if window_length is not None and len(vectors) != window_length:
            raise InvalidSeed(
                f"seed has {len(vectors)} entries, window length is {window_length}"
            )
        return vectors

    @property
    def window_length(self) -> int:
        """Number of entries in the window (W)."""
        return self._window_length

    @property
    def dim(self) -> int:
        """Dimensionality of each entry (D)."""
        return self._dim

    @property
    def total_advanced(self) -> int:
        """Total vectors appended since construction."""
        return self._total_advanced

    def __len__(self) -> int:
        return len(self._entries)

    def current(self) -> List[np.ndarray]:
        """
        Snapshot of the window contents, oldest first.

        Returns:
            List of W copies; mutating them does not affect the window.
        """
        return [v.copy() for v in self._entries]

    def as_array(self) -> np.ndarray:
        """Window contents as a (W, D) array."""
        return np.stack(list(self._entries))

    def latest(self) -> np.ndarray:
        """Copy of the most recent entry."""
        return self._entries[-1].copy()

    def advance(self, vector: Sequence[float]) -> None:
        """
        Drop the oldest entry and append a new one.

        Args:
            vector: FlatVector of dimensionality D

        Raises:
            SchedulingFault: If the vector has the wrong dimensionality
                or the window length drifted
        """
        new_vector = np.array(vector, dtype=np.float64).reshape(-1)
        if new_vector.size != self._dim:
            raise SchedulingFault(
                f"cannot advance window with {new_vector.size}-dim vector, "
                f"expected {self._dim}"
            )

        # maxlen evicts index 0
        self._entries.append(new_vector)
        self._total_advanced += 1

        if len(self._entries) != self._window_length:
            raise SchedulingFault(
                f"window length drifted to {len(self._entries)}, "
                f"expected {self._window_length}"
            )

    def metrics(self) -> dict:
        """
        Get window metrics for observability.

        Returns:
            Dict with window_length, dim, total_advanced
        """
        return {
            "window_length": self._window_length,
            "dim": self._dim,
            "total_advanced": self._total_advanced,
        }
