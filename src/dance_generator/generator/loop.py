"""
Generation Loop
===============

Autoregressive pose generation as a cooperative asyncio state machine.

Step Cycle:
    window.current() -> await engine.predict() -> sampler.sample()
        -> window.advance() -> smoother.smooth() -> renderer.render()
        -> pacing pause -> next step

States:
    IDLE -> RUNNING -> IDLE       start() / stop() or max_steps reached
    RUNNING -> FAULTED            InferenceFailure, InvalidDistribution,
                                  SchedulingFault (no retry)

Design Philosophy:
    - At most one step in flight; the step task is the only writer of
      the window and the smoother history
    - A step suspends only on inference and on the pacing pause
    - stop() is honored at the next suspension point; an inference
      result that arrives after stop() is discarded
    - All fallible work happens before the window or history is touched,
      so a step is either fully applied or not at all
"""

import asyncio
import logging
import math
import time
from typing import Optional, Sequence

from dance_generator.errors import (
    GenerationError,
    GeneratorConfigError,
    InferenceFailure,
    InvalidSeed,
    SchedulingFault,
)
from dance_generator.inference.engine import InferenceEngine
from dance_generator.models.output import PoseFrame
from dance_generator.models.pose import flat_to_pose
from dance_generator.models.state import GeneratorState, GeneratorStatus
from dance_generator.output.broadcaster import PoseRenderer
from dance_generator.sampling.mixture import MixtureSampler
from dance_generator.sequence.seed import SeedSource
from dance_generator.sequence.window import SequenceWindow
from dance_generator.signals.smoother import TemporalSmoother


logger = logging.getLogger(__name__)


class GenerationLoop:
    """
    Drives one generation session at a time.

    Owns the SequenceWindow and TemporalSmoother of the current session;
    both are rebuilt on every start().

    Attributes:
        state: Current lifecycle state
        temperature: Sampling temperature, read once per step
        last_error: Error that faulted the loop, if any

    Example:
        loop = GenerationLoop(
            engine=MockInferenceEngine(),
            renderer=PoseBroadcaster(),
            seed_source=create_seed_source("./seed_sequence.json"),
        )

        await loop.start()
        loop.temperature = 0.8
        ...
        await loop.stop()
    """

    def __init__(
        self,
        engine: InferenceEngine,
        renderer: PoseRenderer,
        seed_source: Optional[SeedSource] = None,
        sampler: Optional[MixtureSampler] = None,
        window_length: Optional[int] = None,
        pacing_ms: float = 30.0,
        temperature: float = 1.0,
        history_size: int = 5,
        base_weight: float = 0.6,
        decay: float = 0.5,
        drain_timeout_sec: float = 2.0,
        max_steps: Optional[int] = None,
        log_every_n_steps: int = 100,
    ) -> None:
        """
        Initialize the generation loop.

        Args:
            engine: Inference collaborator
            renderer: Receives one PoseFrame per completed step
            seed_source: Supplies the seed when start() gets none
            sampler: Mixture sampler (default: entropy-seeded)
            window_length: Required seed length W (None = seed's length)
            pacing_ms: Pause between steps
            temperature: Initial sampling temperature
            history_size: Smoothing history H
            base_weight: Smoothing weight of the most recent pose
            decay: Smoothing weight decay
            drain_timeout_sec: How long stop() waits for an in-flight step
            max_steps: End the session after this many steps (None = unbounded)
            log_every_n_steps: Log progress every N steps
        """
        if pacing_ms < 0:
            raise GeneratorConfigError("pacing_ms must be >= 0")
        if max_steps is not None and max_steps < 1:
            raise GeneratorConfigError("max_steps must be >= 1")

        self.engine = engine
        self.renderer = renderer
        self.seed_source = seed_source
        self.sampler = sampler or MixtureSampler()
        self.window_length = window_length
        self.pacing_ms = pacing_ms
        self.history_size = history_size
        self.base_weight = base_weight
        self.decay = decay
        self.drain_timeout_sec = drain_timeout_sec
        self.max_steps = max_steps
        self.log_every_n_steps = log_every_n_steps

        self._temperature = self._check_temperature(temperature)

        # Session state
        self._state = GeneratorState.IDLE
        self._session_id: int = 0
        self._window: Optional[SequenceWindow] = None
        self._smoother: Optional[TemporalSmoother] = None
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._last_error: Optional[GenerationError] = None

        # Counters
        self._steps_completed: int = 0
        self._discarded_results: int = 0
        self._render_errors: int = 0

        logger.info(
            f"GenerationLoop initialized: pacing={pacing_ms}ms, "
            f"temperature={temperature}, history={history_size}"
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is GeneratorState.RUNNING

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        self._temperature = self._check_temperature(value)

    @property
    def session_id(self) -> int:
        """Number of sessions started; identifies the current one."""
        return self._session_id

    @property
    def steps_completed(self) -> int:
        return self._steps_completed

    @property
    def discarded_results(self) -> int:
        return self._discarded_results

    @property
    def last_error(self) -> Optional[GenerationError]:
        return self._last_error

    @property
    def window(self) -> Optional[SequenceWindow]:
        """Window of the current (or last) session."""
        return self._window

    @property
    def smoother(self) -> Optional[TemporalSmoother]:
        """Smoother of the current (or last) session."""
        return self._smoother

    @staticmethod
    def _check_temperature(value: float) -> float:
        value = float(value)
        if not math.isfinite(value) or value <= 0:
            raise GeneratorConfigError(f"temperature must be positive, got {value}")
        return value

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self, seed: Optional[Sequence[Sequence[float]]] = None) -> bool:
        """
        Start a new generation session.

        Args:
            seed: Initial window contents. Falls back to seed_source.

        Returns:
            True if a session was started, False if already running

        Raises:
            GeneratorConfigError: If no seed and no seed source is available
            InvalidSeed: If the seed cannot initialize the window
                (the loop is left FAULTED)
        """
        if self._state is GeneratorState.RUNNING:
            logger.debug("start() ignored, generation already running")
            return False

        if seed is None and self.seed_source is None:
            raise GeneratorConfigError("no seed given and no seed source configured")

        try:
            if seed is None:
                seed = self.seed_source()
            window = SequenceWindow(seed, self.window_length)
        except InvalidSeed as e:
            self._fault(e)
            raise

        self._window = window
        self._smoother = TemporalSmoother(
            history_size=self.history_size,
            base_weight=self.base_weight,
            decay=self.decay,
        )
        self._session_id += 1
        self._steps_completed = 0
        self._render_errors = 0
        self._last_error = None
        self._stop_event = asyncio.Event()
        self._state = GeneratorState.RUNNING

        self._task = asyncio.create_task(
            self._run(self._session_id, self._stop_event),
            name=f"generation_session_{self._session_id}",
        )

        logger.info(
            f"Generation session {self._session_id} started: "
            f"W={window.window_length}, D={window.dim}"
        )
        return True

    async def stop(self) -> bool:
        """
        Stop the current session.

        Wakes the pacing pause and waits up to drain_timeout_sec for an
        in-flight step to finish; its inference result is discarded.
        A step that does not drain in time is cancelled.

        Returns:
            True if a running session was stopped, False otherwise
        """
        if self._state is not GeneratorState.RUNNING:
            return False

        logger.info(f"Stopping generation session {self._session_id}...")
        self._state = GeneratorState.IDLE
        if self._stop_event is not None:
            self._stop_event.set()

        task = self._task
        if task is None or task.done() or task is asyncio.current_task():
            return True

        _, pending = await asyncio.wait({task}, timeout=self.drain_timeout_sec)
        if pending:
            logger.warning(
                f"Session {self._session_id} did not drain in "
                f"{self.drain_timeout_sec}s, cancelling"
            )
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        return True

    async def join(self) -> None:
        """
        Wait for the current session to end.

        Raises:
            GenerationError: The error that faulted the session
        """
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

        if self._state is GeneratorState.FAULTED and self._last_error is not None:
            raise self._last_error

    def status(self) -> GeneratorStatus:
        """Snapshot of the loop for the control surface."""
        return GeneratorStatus(
            state=self._state,
            temperature=self._temperature,
            session_id=self._session_id,
            steps_completed=self._steps_completed,
            discarded_results=self._discarded_results,
            render_errors=self._render_errors,
            window_length=self._window.window_length if self._window else None,
            history_size=len(self._smoother.history) if self._smoother else None,
            last_error=(
                f"{type(self._last_error).__name__}: {self._last_error}"
                if self._last_error is not None
                else None
            ),
        )

    # =========================================================================
    # Step Cycle
    # =========================================================================

    def _is_current(self, session_id: int) -> bool:
        return self._state is GeneratorState.RUNNING and self._session_id == session_id

    def _fault(self, error: GenerationError) -> None:
        self._state = GeneratorState.FAULTED
        self._last_error = error
        logger.error(
            f"Generation session {self._session_id} faulted: "
            f"{type(error).__name__}: {error}"
        )

    async def _run(self, session_id: int, stop_event: asyncio.Event) -> None:
        """Step until stopped, faulted or max_steps is reached."""
        try:
            while self._is_current(session_id):
                await self._step(session_id)

                if self.max_steps is not None and self._steps_completed >= self.max_steps:
                    if self._is_current(session_id):
                        self._state = GeneratorState.IDLE
                        logger.info(
                            f"Session {session_id} reached max_steps={self.max_steps}"
                        )
                    break

                if not self._is_current(session_id):
                    break

                if await self._pause(stop_event):
                    break

        except GenerationError as e:
            if self._session_id == session_id:
                self._fault(e)
        except Exception as e:
            if self._session_id == session_id:
                fault = SchedulingFault(f"unexpected error in step: {e}")
                fault.__cause__ = e
                self._fault(fault)

        logger.info(
            f"Generation session {session_id} ended after "
            f"{self._steps_completed} steps"
        )

    async def _pause(self, stop_event: asyncio.Event) -> bool:
        """Pacing pause. Returns True if stop was requested."""
        if self.pacing_ms <= 0:
            await asyncio.sleep(0)
            return stop_event.is_set()

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.pacing_ms / 1000.0)
            return True
        except asyncio.TimeoutError:
            return False

    async def _step(self, session_id: int) -> bool:
        """
        Run one step of the session.

        Returns:
            True if a pose was emitted, False if the result was discarded
        """
        window = self._window
        smoother = self._smoother
        if window is None or smoother is None:
            raise SchedulingFault("step scheduled without an initialized session")

        snapshot = window.current()

        try:
            prediction = await self.engine.predict(snapshot)
        except Exception as e:
            if not self._is_current(session_id):
                self._discard(session_id, f"inference error after stop: {e}")
                return False
            if isinstance(e, InferenceFailure):
                raise
            raise InferenceFailure(f"inference engine error: {e}") from e

        if not self._is_current(session_id):
            self._discard(session_id, "inference result arrived after stop")
            return False

        if prediction.dim != window.dim:
            raise InferenceFailure(
                f"prediction dimensionality {prediction.dim} does not match "
                f"window dimensionality {window.dim}"
            )

        temperature = self._temperature
        sample = self.sampler.sample(
            prediction.weights,
            prediction.means,
            prediction.stddevs,
            window.dim,
            prediction.num_mixtures,
            temperature,
        )
        pose = flat_to_pose(sample)

        # Commit: nothing below validates input
        window.advance(sample)
        smoothed = smoother.smooth(pose)
        self._steps_completed += 1

        frame = PoseFrame(
            session_id=session_id,
            step=self._steps_completed,
            timestamp=time.time(),
            temperature=temperature,
            keypoints=[(float(x), float(y)) for x, y in smoothed],
        )
        self._emit(frame)

        if self._steps_completed % self.log_every_n_steps == 0:
            logger.info(
                f"Session {session_id} [step {self._steps_completed}]: "
                f"M={prediction.num_mixtures}, temperature={temperature:.2f}"
            )

        return True

    def _discard(self, session_id: int, reason: str) -> None:
        self._discarded_results += 1
        logger.debug(f"Session {session_id}: discarded step ({reason})")

    def _emit(self, frame: PoseFrame) -> None:
        try:
            self.renderer.render(frame)
        except Exception as e:
            self._render_errors += 1
            logger.error(f"Renderer error (step={frame.step}): {e}")
