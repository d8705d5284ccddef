"""
Temporal Pose Smoother
======================

Suppresses sampling jitter by blending each new pose with recent history.

This smoother:
    - Takes a raw sampled Pose of shape (K, 2)
    - Blends every present keypoint with up to H historical values
    - Leaves missing (0, 0) keypoints untouched
    - Records the UNSMOOTHED pose as the newest history entry

Weighting:
    weight_j = base_weight * decay^j    (j = 0 is the most recent entry)

    For each historical entry, from the oldest considered to the most
    recent:
        value = value * (1 - weight_j) + historical_value * weight_j

    The most recent entry is blended last with the largest weight, so it
    dominates. A historical entry is skipped for a keypoint when it is
    missing there or is too short to contain that keypoint.
"""

import logging
from collections import deque
from typing import List, Sequence

import numpy as np

from dance_generator.models.pose import missing_mask


logger = logging.getLogger(__name__)


class TemporalSmoother:
    """
    Exponentially-weighted per-keypoint pose smoother.

    Attributes:
        history_size: Maximum poses kept in history (H)
        base_weight: Weight of the most recent historical pose
        decay: Per-step decay of historical weights

    Example:
        smoother = TemporalSmoother(history_size=5)

        for pose in sampled_poses:
            smoothed = smoother.smooth(pose)
            renderer.render(smoothed)
    """

    def __init__(
        self,
        history_size: int = 5,
        base_weight: float = 0.6,
        decay: float = 0.5,
    ) -> None:
        """
        Initialize smoother.

        Args:
            history_size: Poses kept for smoothing, >= 1
            base_weight: Weight of the most recent historical pose in (0, 1]
            decay: Multiplicative decay per older entry in (0, 1]
        """
        if history_size < 1:
            raise ValueError("history_size must be >= 1")
        if not 0 < base_weight <= 1:
            raise ValueError("base_weight must be in (0, 1]")
        if not 0 < decay <= 1:
            raise ValueError("decay must be in (0, 1]")

        self.history_size = history_size
        self.base_weight = base_weight
        self.decay = decay

        # Most recent first
        self._history: deque = deque(maxlen=history_size)
        self._pose_count: int = 0
        self._missing_count: int = 0

        logger.debug(
            f"TemporalSmoother initialized: H={history_size}, "
            f"base_weight={base_weight}, decay={decay}"
        )

    @property
    def history(self) -> List[np.ndarray]:
        """Copies of the history, most recent first."""
        return [pose.copy() for pose in self._history]

    @property
    def pose_count(self) -> int:
        """Number of poses smoothed since the last reset."""
        return self._pose_count

    def weight(self, j: int) -> float:
        """Blend weight for the j-th most recent historical pose."""
        return self.base_weight * self.decay ** j

    def smooth(self, pose: Sequence[Sequence[float]]) -> np.ndarray:
        """
        Smooth a new pose against history and record it.

        Args:
            pose: Raw pose of shape (K, 2)

        Returns:
            New smoothed pose of shape (K, 2)
        """
        raw = np.array(pose, dtype=np.float64).reshape(-1, 2)
        smoothed = raw.copy()
        present = ~missing_mask(raw)

        for j in reversed(range(len(self._history))):
            historical = self._history[j]
            n = min(len(historical), len(raw))
            usable = present[:n] & ~missing_mask(historical[:n])
            if not np.any(usable):
                continue

            w = self.weight(j)
            smoothed[:n][usable] = (
                smoothed[:n][usable] * (1.0 - w) + historical[:n][usable] * w
            )

        self._history.appendleft(raw)
        self._pose_count += 1
        self._missing_count += int(np.count_nonzero(~present))

        return smoothed

    def reset(self) -> None:
        """Clear history."""
        self._history.clear()
        self._pose_count = 0
        self._missing_count = 0
        logger.debug("TemporalSmoother reset")

    def get_metrics(self) -> dict:
        """Get smoother metrics for observability."""
        return {
            "pose_count": self._pose_count,
            "history_length": len(self._history),
            "history_size": self.history_size,
            "missing_keypoints": self._missing_count,
            "base_weight": self.base_weight,
            "decay": self.decay,
        }
