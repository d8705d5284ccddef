"""
Dance Generator Main Application
================================

FastAPI entry point for the dance generator.

Wires the inference engine, seed source, pose broadcaster and
generation loop together and exposes them as a control surface.

Endpoints:
    GET  /                 - Service information
    GET  /health           - Liveness probe (is process alive?)
    GET  /ready            - Readiness probe (engine loaded?)
    GET  /status           - Generation loop status
    POST /generate/start   - Start a generation session
    POST /generate/stop    - Stop the current session
    PUT  /temperature      - Set sampling temperature
    PUT  /visualization    - Set renderer visualization mode
    GET  /pose             - Latest emitted pose
    WS   /ws/poses         - Real-time pose stream
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Union

import numpy as np
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from dance_generator.config import Settings, settings
from dance_generator.errors import GeneratorConfigError, InvalidSeed
from dance_generator.generator import GenerationLoop
from dance_generator.inference import MockInferenceEngine, OnnxInferenceEngine
from dance_generator.models.control import TemperatureUpdate, VisualizationUpdate
from dance_generator.models.output import PoseFrame
from dance_generator.models.pose import flat_to_pose
from dance_generator.output import PoseBroadcaster
from dance_generator.sampling import MixtureSampler
from dance_generator.sequence import SeedSource, SequenceWindow, create_seed_source


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_engine: Optional[Union[MockInferenceEngine, OnnxInferenceEngine]] = None
_seed_source: Optional[SeedSource] = None
_broadcaster: Optional[PoseBroadcaster] = None
_loop: Optional[GenerationLoop] = None
_startup_time: float = 0.0
_is_ready: bool = False


# =============================================================================
# Getters
# =============================================================================

def get_loop() -> Optional[GenerationLoop]:
    return _loop

def get_broadcaster() -> Optional[PoseBroadcaster]:
    return _broadcaster

def is_ready() -> bool:
    return _is_ready


# =============================================================================
# Factories
# =============================================================================

def create_inference_engine(
    config: Settings = settings,
) -> Union[MockInferenceEngine, OnnxInferenceEngine]:
    """
    Create inference engine based on config.

    Fails fast if the ONNX backend is requested but cannot be loaded.
    """
    backend = config.inference.backend

    if backend == "mock":
        logger.info("Using MockInferenceEngine")
        mock = config.inference.mock
        return MockInferenceEngine(
            num_mixtures=mock.num_mixtures,
            amplitude=mock.amplitude,
            period_steps=mock.period_steps,
            stddev=mock.stddev,
            latency_ms=mock.latency_ms,
        )

    elif backend == "onnx":
        logger.info(f"Using OnnxInferenceEngine: {config.inference.model_path}")
        return OnnxInferenceEngine(
            model_path=config.inference.model_path,
            input_name=config.inference.input_name,
        )

    else:
        raise ValueError(f"Unknown inference backend: {backend}")


def create_generation_loop(
    engine,
    renderer,
    seed_source: Optional[SeedSource],
    config: Settings = settings,
) -> GenerationLoop:
    """Build a GenerationLoop from settings."""
    rng = np.random.default_rng(config.generator.random_seed)
    return GenerationLoop(
        engine=engine,
        renderer=renderer,
        seed_source=seed_source,
        sampler=MixtureSampler(rng=rng),
        window_length=config.generator.window_length,
        pacing_ms=config.generator.pacing_ms,
        temperature=config.temperature.default,
        history_size=config.smoothing.history_size,
        base_weight=config.smoothing.base_weight,
        decay=config.smoothing.decay,
        drain_timeout_sec=config.generator.drain_timeout_sec,
        log_every_n_steps=config.generator.log_every_n_steps,
    )


def _publish_seed_preview(seed_source: SeedSource, broadcaster: PoseBroadcaster) -> None:
    """Publish the newest seed pose so renderers have something to draw."""
    try:
        window = SequenceWindow(seed_source())
        keypoints = flat_to_pose(window.latest())
    except (GeneratorConfigError, InvalidSeed, FileNotFoundError) as e:
        logger.warning(f"No seed preview available: {e}")
        return

    broadcaster.render(PoseFrame(
        session_id=0,
        step=0,
        timestamp=time.time(),
        temperature=settings.temperature.default,
        keypoints=[(float(x), float(y)) for x, y in keypoints],
    ))


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _engine, _seed_source, _broadcaster, _loop, _startup_time, _is_ready

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _engine = create_inference_engine()
    _seed_source = create_seed_source(
        path=settings.seed.path,
        window_length=settings.generator.window_length,
        num_keypoints=settings.seed.num_keypoints,
        fallback_to_default=settings.seed.fallback_to_default,
    )
    _broadcaster = PoseBroadcaster(
        queue_size=settings.output.subscriber_queue_size,
        mode=settings.output.visualization_mode,
    )
    _loop = create_generation_loop(_engine, _broadcaster, _seed_source)

    _publish_seed_preview(_seed_source, _broadcaster)
    _is_ready = True
    logger.info("All components started")

    yield

    logger.info("Shutting down gracefully...")
    _is_ready = False
    if _loop is not None:
        await _loop.stop()
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="DanceGenerator",
    description="Real-time dance pose generation from a mixture-density model",
    version=settings.service.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "DanceGenerator",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "inference_backend": settings.inference.backend,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process is up."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """Readiness probe - 503 until the engine and loop are built."""
    if _is_ready and _loop is not None:
        return JSONResponse({"status": "ready"})
    return JSONResponse({"status": "not_ready"}, status_code=503)


@app.get("/status")
async def status() -> JSONResponse:
    """Generation loop status with renderer metrics."""
    loop = get_loop()
    if loop is None:
        return JSONResponse({"error": "Generator not initialized"}, status_code=503)

    payload = loop.status().model_dump(mode="json")
    broadcaster = get_broadcaster()
    if broadcaster is not None:
        payload["output"] = broadcaster.metrics()
    payload["temperature_range"] = [settings.temperature.min, settings.temperature.max]
    return JSONResponse(payload)


@app.post("/generate/start")
async def start_generation() -> JSONResponse:
    """Start a generation session (no-op if one is running)."""
    loop = get_loop()
    if loop is None:
        return JSONResponse({"error": "Generator not initialized"}, status_code=503)

    try:
        started = await loop.start()
    except (GeneratorConfigError, InvalidSeed, FileNotFoundError) as e:
        logger.error(f"Failed to start generation: {e}")
        return JSONResponse(
            {"error": f"{type(e).__name__}: {e}", "status": loop.status().model_dump(mode="json")},
            status_code=409,
        )

    return JSONResponse({
        "started": started,
        "status": loop.status().model_dump(mode="json"),
    })


@app.post("/generate/stop")
async def stop_generation() -> JSONResponse:
    """Stop the current session (no-op if idle)."""
    loop = get_loop()
    if loop is None:
        return JSONResponse({"error": "Generator not initialized"}, status_code=503)

    stopped = await loop.stop()
    return JSONResponse({
        "stopped": stopped,
        "status": loop.status().model_dump(mode="json"),
    })


@app.put("/temperature")
async def set_temperature(update: TemperatureUpdate) -> JSONResponse:
    """Set the sampling temperature within the configured range."""
    loop = get_loop()
    if loop is None:
        return JSONResponse({"error": "Generator not initialized"}, status_code=503)

    low, high = settings.temperature.min, settings.temperature.max
    if not low <= update.temperature <= high:
        return JSONResponse(
            {"error": f"temperature must be within [{low}, {high}]"},
            status_code=422,
        )

    loop.temperature = update.temperature
    logger.info(f"Temperature set to {update.temperature}")
    return JSONResponse({"temperature": loop.temperature})


@app.put("/visualization")
async def set_visualization(update: VisualizationUpdate) -> JSONResponse:
    """Set the visualization mode stamped onto emitted poses."""
    broadcaster = get_broadcaster()
    if broadcaster is None:
        return JSONResponse({"error": "Generator not initialized"}, status_code=503)

    broadcaster.mode = update.mode
    logger.info(f"Visualization mode set to {update.mode.value}")
    return JSONResponse({"mode": broadcaster.mode.value})


@app.get("/pose")
async def latest_pose() -> JSONResponse:
    """Get the most recently emitted pose."""
    broadcaster = get_broadcaster()
    frame = broadcaster.latest if broadcaster is not None else None

    if frame is None:
        return JSONResponse({"error": "No pose available yet"}, status_code=503)

    return JSONResponse(frame.model_dump(mode="json"))


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/poses")
async def pose_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint streaming every emitted pose."""
    broadcaster = get_broadcaster()
    await websocket.accept()
    if broadcaster is None:
        await websocket.close(code=1013)
        return

    logger.info("Client connected to /ws/poses")
    queue = broadcaster.subscribe()

    try:
        if broadcaster.latest is not None:
            await websocket.send_json(broadcaster.latest.model_dump(mode="json"))
        while True:
            frame = await queue.get()
            await websocket.send_json(frame.model_dump(mode="json"))
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        broadcaster.unsubscribe(queue)
        logger.info("Client disconnected from /ws/poses")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "dance_generator.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
