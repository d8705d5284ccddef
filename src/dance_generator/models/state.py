"""
Generator State Models
======================

Lifecycle states of the generation loop and its status snapshot.

Transitions:
    IDLE    -> RUNNING:  start(seed)
    RUNNING -> IDLE:     stop()
    RUNNING -> FAULTED:  inference failure, invalid distribution, scheduling fault
    FAULTED -> RUNNING:  start(seed) (no automatic retry)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class GeneratorState(str, Enum):
    """
    Discrete states of the GenerationLoop.

    Attributes:
        IDLE: No session running
        RUNNING: Step cycle active
        FAULTED: Halted on an unrecoverable error
    """

    IDLE = "IDLE"
    RUNNING = "RUNNING"
    FAULTED = "FAULTED"


class GeneratorStatus(BaseModel):
    """
    Point-in-time snapshot of the generation loop.

    Exposed by the control surface; never fed back into the loop.
    """

    state: GeneratorState = Field(..., description="Current lifecycle state")
    temperature: float = Field(..., gt=0, description="Current sampling temperature")
    session_id: int = Field(..., ge=0, description="Number of sessions started")
    steps_completed: int = Field(
        ...,
        ge=0,
        description="Steps emitted in the current session",
    )
    discarded_results: int = Field(
        default=0,
        ge=0,
        description="Inference results dropped after stop()",
    )
    render_errors: int = Field(
        default=0,
        ge=0,
        description="Renderer exceptions in the current session",
    )
    window_length: Optional[int] = Field(
        default=None,
        description="Window length W, once a session has started",
    )
    history_size: Optional[int] = Field(
        default=None,
        description="Current number of poses in smoothing history",
    )
    last_error: Optional[str] = Field(
        default=None,
        description="Error that faulted the loop, if any",
    )
