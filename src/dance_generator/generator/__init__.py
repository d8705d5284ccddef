"""
Generator Module
================

The autoregressive generation loop.

Components:
    - GenerationLoop: IDLE/RUNNING/FAULTED state machine that paces
      inference, sampling, window advance, smoothing and emission
"""

from dance_generator.generator.loop import GenerationLoop

__all__ = [
    "GenerationLoop",
]
