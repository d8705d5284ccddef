"""
Dance Generator
===============

Real-time dance pose generation from a mixture-density sequence model.

This package provides the autoregressive sampling engine: it feeds a
sliding window of poses to a pretrained model, samples the next pose
from the predicted Gaussian mixture under a temperature control, and
smooths the result before handing it to a renderer.

Components:
    - sampling: MixtureSampler (temperature, categorical, Box-Muller)
    - sequence: SequenceWindow and seed sources
    - signals: TemporalSmoother
    - inference: InferenceEngine protocol, mock and ONNX engines
    - generator: GenerationLoop state machine
    - output: PoseRenderer protocol and PoseBroadcaster

Example:
    from dance_generator.generator import GenerationLoop
    from dance_generator.inference import MockInferenceEngine
    from dance_generator.output import PoseBroadcaster
    from dance_generator.sequence import default_seed_sequence

    loop = GenerationLoop(MockInferenceEngine(), PoseBroadcaster())
    await loop.start(default_seed_sequence())
"""

__version__ = "0.1.0"
__author__ = "Dance Generator Project"

__all__ = [
    "__version__",
]
