"""
Pose Representation
===================

Conversions between the two pose representations used by the generator.

    FlatVector: [x0, y0, x1, y1, ...]   shape (2K,)  - model input/output
    Pose:       [[x0, y0], [x1, y1], ...] shape (K, 2) - smoothing/rendering

A keypoint equal to (0, 0) is the missing-keypoint sentinel. It marks an
undetected joint and must never be treated as the image origin.
"""

from typing import Sequence

import numpy as np


MISSING_KEYPOINT = (0.0, 0.0)


def flat_to_pose(flat: Sequence[float]) -> np.ndarray:
    """
    Reshape an interleaved FlatVector into a (K, 2) pose.

    Args:
        flat: Interleaved x, y values

    Returns:
        New float64 array of shape (K, 2)

    Raises:
        ValueError: If the vector has odd length
    """
    values = np.asarray(flat, dtype=np.float64)
    if values.ndim != 1 or values.size % 2 != 0:
        raise ValueError(
            f"FlatVector must be 1-D with even length, got shape {values.shape}"
        )
    return values.reshape(-1, 2).copy()


def pose_to_flat(pose: Sequence[Sequence[float]]) -> np.ndarray:
    """Flatten a (K, 2) pose into an interleaved FlatVector."""
    points = np.asarray(pose, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"Pose must have shape (K, 2), got {points.shape}")
    return points.reshape(-1).copy()


def missing_mask(pose: np.ndarray) -> np.ndarray:
    """Boolean mask of keypoints equal to the (0, 0) sentinel."""
    return (pose[:, 0] == 0.0) & (pose[:, 1] == 0.0)
