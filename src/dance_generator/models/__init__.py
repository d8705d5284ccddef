"""
Data Models
===========

Typed models for the dance generator.

Models:
    Pose:
        - flat_to_pose / pose_to_flat: FlatVector <-> (K, 2) conversions
        - missing_mask: (0, 0) sentinel detection

    Prediction:
        - MixturePrediction: One step of mixture-density output

    State:
        - GeneratorState: Loop lifecycle (IDLE, RUNNING, FAULTED)
        - GeneratorStatus: Status snapshot for the control surface

    Output:
        - VisualizationMode: Renderer drawing style
        - PoseFrame: Emitted pose contract

    Control:
        - TemperatureUpdate, VisualizationUpdate: Control request bodies
"""

from dance_generator.models.pose import (
    MISSING_KEYPOINT,
    flat_to_pose,
    missing_mask,
    pose_to_flat,
)
from dance_generator.models.prediction import MixturePrediction
from dance_generator.models.state import GeneratorState, GeneratorStatus
from dance_generator.models.output import PoseFrame, VisualizationMode
from dance_generator.models.control import TemperatureUpdate, VisualizationUpdate

__all__ = [
    # Pose
    "MISSING_KEYPOINT",
    "flat_to_pose",
    "pose_to_flat",
    "missing_mask",
    # Prediction
    "MixturePrediction",
    # State
    "GeneratorState",
    "GeneratorStatus",
    # Output
    "VisualizationMode",
    "PoseFrame",
    # Control
    "TemperatureUpdate",
    "VisualizationUpdate",
]
