"""
Inference Module
================

Mixture-density inference behind a pluggable interface.

The generation loop consumes ONLY MixturePrediction outputs from this
module, never model internals.

Components:
    - InferenceEngine: Protocol for next-step prediction
    - MockInferenceEngine: Deterministic mock for testing and demos
    - OnnxInferenceEngine: Pretrained ONNX model via onnxruntime
"""

from dance_generator.inference.engine import (
    InferenceEngine,
    MockInferenceEngine,
)
from dance_generator.inference.onnx_engine import OnnxInferenceEngine

__all__ = [
    "InferenceEngine",
    "MockInferenceEngine",
    "OnnxInferenceEngine",
]
