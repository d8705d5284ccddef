"""
Seed Sequences
==============

Sources for the initial contents of the SequenceWindow.

Seed file format:
    {
        "sequence": [
            [x0, y0, x1, y1, ...],   # oldest
            ...
            [x0, y0, x1, y1, ...]    # newest
        ]
    }

When no seed file exists, a placeholder stick figure on the 33-keypoint
MediaPipe layout is used: nose, shoulders, hips, knees and ankles are set,
every other keypoint is left at the (0, 0) missing sentinel.
"""

import json
import logging
from pathlib import Path
from typing import Callable, List, Optional

from dance_generator.errors import GeneratorConfigError, InvalidSeed


logger = logging.getLogger(__name__)


SeedSource = Callable[[], List[List[float]]]


# MediaPipe keypoint index -> placeholder (x, y)
DEFAULT_FIGURE = {
    0: (400.0, 100.0),   # nose
    11: (350.0, 150.0),  # left shoulder
    12: (450.0, 150.0),  # right shoulder
    23: (350.0, 300.0),  # left hip
    24: (450.0, 300.0),  # right hip
    25: (350.0, 400.0),  # left knee
    26: (450.0, 400.0),  # right knee
    27: (350.0, 500.0),  # left ankle
    28: (450.0, 500.0),  # right ankle
}


def default_seed_sequence(
    window_length: int = 30,
    num_keypoints: int = 33,
) -> List[List[float]]:
    """
    Build the placeholder stick-figure seed.

    Args:
        window_length: Number of identical poses (W)
        num_keypoints: Keypoints per pose (K); figure joints beyond K are dropped

    Returns:
        W FlatVectors of length 2K
    """
    pose = [0.0] * (num_keypoints * 2)
    for index, (x, y) in DEFAULT_FIGURE.items():
        if index < num_keypoints:
            pose[2 * index] = x
            pose[2 * index + 1] = y
    return [list(pose) for _ in range(window_length)]


def load_seed_sequence(path: str) -> List[List[float]]:
    """
    Load a seed sequence from JSON.

    Args:
        path: Path to a file with a top-level "sequence" list

    Returns:
        List of FlatVectors

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidSeed: If the file is not a valid seed document
    """
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidSeed(f"seed file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("sequence"), list):
        raise InvalidSeed(f"seed file {path} has no 'sequence' list")

    sequence = data["sequence"]
    logger.info(f"Loaded seed sequence from {path}: {len(sequence)} poses")
    return sequence


def create_seed_source(
    path: Optional[str],
    window_length: int = 30,
    num_keypoints: int = 33,
    fallback_to_default: bool = True,
) -> SeedSource:
    """
    Create a seed source callable for the GenerationLoop.

    The file is read on every call so an edited seed takes effect on
    the next start.

    Args:
        path: Seed JSON path, or None for the default figure
        window_length: W for the default figure
        num_keypoints: K for the default figure
        fallback_to_default: Use the default figure when the file is missing

    Raises:
        GeneratorConfigError: If neither a file nor a fallback is available
    """
    if path is None:
        if not fallback_to_default:
            raise GeneratorConfigError("no seed path configured and fallback disabled")
        return lambda: default_seed_sequence(window_length, num_keypoints)

    def _source() -> List[List[float]]:
        if Path(path).exists():
            return load_seed_sequence(path)
        if not fallback_to_default:
            raise GeneratorConfigError(f"seed file not found: {path}")
        logger.warning(f"No seed sequence at {path}, using default stick figure")
        return default_seed_sequence(window_length, num_keypoints)

    return _source
