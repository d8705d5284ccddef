#!/usr/bin/env python3
"""
Generation Run Script
=====================

Standalone script to exercise the generation loop without the HTTP service.

This script:
    1. Builds an inference engine (mock by default, or an ONNX model)
    2. Starts a generation session from the seed file or default figure
    3. Logs step statistics every report interval
    4. Reports a final summary

Usage:
    python scripts/run_generation.py --duration 30
    python scripts/run_generation.py --backend onnx --model ./model.onnx
    python scripts/run_generation.py --temperature 0.7 --random-seed 7
"""

import argparse
import asyncio
import logging
import os
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import numpy as np

from dance_generator.errors import GenerationError, GeneratorConfigError
from dance_generator.generator import GenerationLoop
from dance_generator.inference import MockInferenceEngine, OnnxInferenceEngine
from dance_generator.models.state import GeneratorState
from dance_generator.output import PoseBroadcaster
from dance_generator.sampling import MixtureSampler
from dance_generator.sequence import create_seed_source


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_generation(
    backend: str,
    model_path: str,
    seed_path: str,
    duration: int,
    temperature: float,
    pacing_ms: float,
    random_seed: int,
    report_interval: int,
) -> dict:
    """
    Run a generation session for a fixed duration.

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("Dance Generation Run")
    logger.info("=" * 60)
    logger.info(f"Backend: {backend}")
    logger.info(f"Duration: {duration} seconds")
    logger.info(f"Temperature: {temperature}")
    logger.info(f"Pacing: {pacing_ms} ms")
    logger.info("=" * 60)

    if backend == "onnx":
        engine = OnnxInferenceEngine(model_path=model_path)
    else:
        engine = MockInferenceEngine()

    broadcaster = PoseBroadcaster()
    loop = GenerationLoop(
        engine=engine,
        renderer=broadcaster,
        seed_source=create_seed_source(seed_path),
        sampler=MixtureSampler(rng=np.random.default_rng(random_seed)),
        pacing_ms=pacing_ms,
        temperature=temperature,
    )

    try:
        await loop.start()
    except (GenerationError, GeneratorConfigError) as e:
        logger.error(f"Failed to start generation: {type(e).__name__}: {e}")
        return {"duration": 0.0, "steps": 0, "faulted": True}

    start_time = time.time()
    last_report_time = start_time
    last_step_count = 0

    try:
        while loop.state is GeneratorState.RUNNING:
            elapsed = time.time() - start_time
            if elapsed >= duration:
                logger.info(f"Run duration ({duration}s) reached")
                break

            time_since_report = time.time() - last_report_time
            if time_since_report >= report_interval:
                steps = loop.steps_completed
                rate = (steps - last_step_count) / time_since_report
                latest = broadcaster.latest
                present = sum(1 for x, y in latest.keypoints if (x, y) != (0.0, 0.0)) if latest else 0

                logger.info("-" * 40)
                logger.info(f"Progress Report (elapsed: {elapsed:.0f}s)")
                logger.info(f"  Steps: {steps}")
                logger.info(f"  Steps/sec: {rate:.1f}")
                logger.info(f"  Present keypoints: {present}")

                last_report_time = time.time()
                last_step_count = steps

            await asyncio.sleep(0.5)

    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
    finally:
        await loop.stop()

    total_time = time.time() - start_time
    status = loop.status()

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Final state: {status.state.value}")
    logger.info(f"Steps completed: {status.steps_completed}")
    logger.info(f"Discarded results: {status.discarded_results}")
    logger.info(f"Render errors: {status.render_errors}")
    if status.last_error:
        logger.error(f"Fault: {status.last_error}")
    logger.info("=" * 60)

    try:
        await loop.join()
    except GenerationError:
        pass

    return {
        "duration": total_time,
        "steps": status.steps_completed,
        "faulted": status.state is GeneratorState.FAULTED,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Run the dance generation loop standalone"
    )
    parser.add_argument(
        "--backend",
        choices=["mock", "onnx"],
        default=os.environ.get("DANCEGEN_INFERENCE_BACKEND", "mock"),
        help="Inference backend (default: mock)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=os.environ.get("DANCEGEN_MODEL_PATH", "./model.onnx"),
        help="ONNX model path for the onnx backend",
    )
    parser.add_argument(
        "--seed",
        type=str,
        default=os.environ.get("DANCEGEN_SEED_PATH", "./seed_sequence.json"),
        help="Seed sequence JSON (falls back to the default figure)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=30,
        help="Run duration in seconds (default: 30)",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=1.0,
        help="Sampling temperature (default: 1.0)",
    )
    parser.add_argument(
        "--pacing-ms",
        type=float,
        default=30.0,
        help="Pause between steps in ms (default: 30)",
    )
    parser.add_argument(
        "--random-seed",
        type=int,
        default=None,
        help="Seed for reproducible sampling",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=5,
        help="Seconds between progress reports (default: 5)",
    )

    args = parser.parse_args()

    result = asyncio.run(run_generation(
        backend=args.backend,
        model_path=args.model,
        seed_path=args.seed,
        duration=args.duration,
        temperature=args.temperature,
        pacing_ms=args.pacing_ms,
        random_seed=args.random_seed,
        report_interval=args.report_interval,
    ))

    sys.exit(0 if result["steps"] > 0 and not result["faulted"] else 1)


if __name__ == "__main__":
    main()
