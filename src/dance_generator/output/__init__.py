"""
Output Module
=============

Renderer interface for emitted poses.

Components:
    - PoseRenderer: Protocol for anything that draws a PoseFrame
    - PoseBroadcaster: Latest-frame store with per-subscriber queues
"""

from dance_generator.output.broadcaster import PoseBroadcaster, PoseRenderer

__all__ = [
    "PoseBroadcaster",
    "PoseRenderer",
]
