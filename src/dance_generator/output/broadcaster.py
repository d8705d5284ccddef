"""
Pose Broadcaster
================

Renderer-side sink that publishes emitted poses to any number of readers.

This module provides the PoseRenderer protocol and the PoseBroadcaster
class, which acts as the interface between the generation loop and
WebSocket clients (or any other renderer).

Design Rules:
    - render() never blocks the generation loop
    - Each subscriber has a fixed-size queue (drops oldest on overflow)
    - The latest frame is kept for polling readers
    - The visualization mode lives here, not in the generation core;
      it is stamped onto a copy of each frame
    - Does NOT process or modify keypoints
"""

import asyncio
import logging
from typing import List, Optional, Protocol

from dance_generator.models.output import PoseFrame, VisualizationMode


logger = logging.getLogger(__name__)


class PoseRenderer(Protocol):
    """
    Protocol for pose renderers.

    Called at most once per completed generation step with the smoothed
    pose. Keypoints equal to (0, 0) are missing and must be omitted.
    """

    def render(self, frame: PoseFrame) -> None:
        ...


class PoseBroadcaster:
    """
    Fan-out renderer for emitted PoseFrames.

    Attributes:
        queue_size: Max frames buffered per subscriber
        latest: Most recently rendered frame
        dropped_count: Frames dropped across all subscribers

    Example:
        broadcaster = PoseBroadcaster(queue_size=8)
        loop = GenerationLoop(engine, renderer=broadcaster, ...)

        queue = broadcaster.subscribe()
        try:
            while True:
                frame = await queue.get()
                await websocket.send_json(frame.model_dump(mode="json"))
        finally:
            broadcaster.unsubscribe(queue)
    """

    def __init__(
        self,
        queue_size: int = 8,
        mode: VisualizationMode = VisualizationMode.SKELETON,
    ) -> None:
        """
        Initialize broadcaster.

        Args:
            queue_size: Maximum frames per subscriber. Must be >= 1.
            mode: Initial visualization mode
        """
        if queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        self.mode = VisualizationMode(mode)
        self._queue_size = queue_size
        self._subscribers: List[asyncio.Queue] = []
        self._latest: Optional[PoseFrame] = None
        self._rendered_count: int = 0
        self._dropped_count: int = 0

    @property
    def latest(self) -> Optional[PoseFrame]:
        """Most recently rendered frame."""
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def dropped_count(self) -> int:
        """Frames dropped due to slow subscribers."""
        return self._dropped_count

    def render(self, frame: PoseFrame) -> None:
        """
        Publish a frame to all subscribers.

        Args:
            frame: Smoothed pose to publish
        """
        frame = frame.model_copy(update={"mode": self.mode})
        self._latest = frame
        self._rendered_count += 1

        for queue in self._subscribers:
            if queue.full():
                try:
                    queue.get_nowait()
                    self._dropped_count += 1
                    logger.warning(
                        f"Subscriber queue full, dropped oldest pose. "
                        f"Total dropped: {self._dropped_count}"
                    )
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(frame)

    def subscribe(self) -> asyncio.Queue:
        """Register a new subscriber queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.append(queue)
        logger.info(f"Pose subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue; unknown queues are ignored."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)
            logger.info(f"Pose subscriber removed ({len(self._subscribers)} total)")

    def metrics(self) -> dict:
        """
        Get broadcaster metrics for observability.

        Returns:
            Dict with subscribers, rendered_count, dropped_count, mode
        """
        return {
            "subscribers": len(self._subscribers),
            "rendered_count": self._rendered_count,
            "dropped_count": self._dropped_count,
            "mode": self.mode.value,
        }
