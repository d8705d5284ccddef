"""
Sequence Module
===============

Model input window and its seed sources.

Components:
    - SequenceWindow: Fixed-length drop-oldest/push-newest buffer
    - load_seed_sequence: Seed JSON reader
    - default_seed_sequence: Placeholder stick-figure seed
    - create_seed_source: Seed callable for the GenerationLoop
"""

from dance_generator.sequence.window import SequenceWindow
from dance_generator.sequence.seed import (
    DEFAULT_FIGURE,
    SeedSource,
    create_seed_source,
    default_seed_sequence,
    load_seed_sequence,
)

__all__ = [
    "SequenceWindow",
    "SeedSource",
    "DEFAULT_FIGURE",
    "create_seed_source",
    "default_seed_sequence",
    "load_seed_sequence",
]
