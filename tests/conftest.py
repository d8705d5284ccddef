"""
Test Configuration
==================

Pytest fixtures and test configuration for the dance generator.
"""

import asyncio

import numpy as np
import pytest

from dance_generator.models.prediction import MixturePrediction


WINDOW_LENGTH = 30
DIM = 58


class StaticEngine:
    """Inference engine returning the same prediction every call."""

    def __init__(self, prediction: MixturePrediction) -> None:
        self.prediction = prediction
        self.calls = 0
        self.windows = []

    async def predict(self, window):
        self.calls += 1
        self.windows.append(window)
        return self.prediction


class GatedEngine:
    """Inference engine that blocks until released."""

    def __init__(self, prediction: MixturePrediction) -> None:
        self.prediction = prediction
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def predict(self, window):
        self.entered.set()
        await self.release.wait()
        return self.prediction


class FailingEngine:
    """Inference engine that always raises."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def predict(self, window):
        raise self.error


class RecordingRenderer:
    """Renderer that keeps every frame it receives."""

    def __init__(self) -> None:
        self.frames = []

    def render(self, frame) -> None:
        self.frames.append(frame)


class BrokenRenderer:
    """Renderer that raises on every frame."""

    def __init__(self) -> None:
        self.calls = 0

    def render(self, frame) -> None:
        self.calls += 1
        raise RuntimeError("display lost")


@pytest.fixture
def zero_seed():
    """Seed window of 30 zero vectors with D=58."""
    return [[0.0] * DIM for _ in range(WINDOW_LENGTH)]


@pytest.fixture
def constant_prediction():
    """Single-component, zero-variance prediction centred on 100."""
    return MixturePrediction.from_arrays(
        weights=[1.0],
        means=[100.0] * DIM,
        stddevs=[0.0] * DIM,
    )


@pytest.fixture
def static_engine(constant_prediction):
    return StaticEngine(constant_prediction)


@pytest.fixture
def gated_engine_factory():
    return GatedEngine


@pytest.fixture
def failing_engine_factory():
    return FailingEngine


@pytest.fixture
def static_engine_factory():
    return StaticEngine


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def broken_renderer():
    return BrokenRenderer()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
