"""
Pose Output Models
==================

The contract between the generation loop and renderers.

Output Contract:
    {
        "session_id": 1,
        "step": 42,
        "timestamp": 1770500938.284,
        "temperature": 1.0,
        "mode": "skeleton",
        "keypoints": [[400.0, 100.0], [0.0, 0.0], ...]
    }

Design Rules:
    - keypoints may contain [0, 0] entries; renderers must omit them
    - mode is chosen by the control surface and passed by value;
      the generation core never reads it
"""

from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field


class VisualizationMode(str, Enum):
    """Drawing style requested from the renderer."""

    SKELETON = "skeleton"
    SPRITE = "sprite"


class PoseFrame(BaseModel):
    """
    One smoothed pose emitted by the generation loop.

    Step 0 is reserved for the seed preview published before
    generation starts.
    """

    session_id: int = Field(..., ge=0, description="Generation session")
    step: int = Field(..., ge=0, description="Step number within the session")
    timestamp: float = Field(..., description="UNIX time of emission")
    temperature: float = Field(..., gt=0, description="Temperature used to sample")
    mode: VisualizationMode = Field(
        default=VisualizationMode.SKELETON,
        description="Requested drawing style",
    )
    keypoints: List[Tuple[float, float]] = Field(
        ...,
        description="Ordered (x, y) keypoints; (0, 0) marks a missing joint",
    )
