"""
Dance Generator Configuration
=============================

This module handles configuration loading for the dance generator.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    DANCEGEN_INFERENCE_BACKEND -> inference.backend
    DANCEGEN_MODEL_PATH        -> inference.model_path
    DANCEGEN_SEED_PATH         -> seed.path
    DANCEGEN_WINDOW_LENGTH     -> generator.window_length
    DANCEGEN_PACING_MS         -> generator.pacing_ms
    DANCEGEN_RANDOM_SEED       -> generator.random_seed
    DANCEGEN_TEMPERATURE       -> temperature.default
    DANCEGEN_PORT              -> server.port
    DANCEGEN_LOG_LEVEL         -> logging.level
    PORT                       -> server.port (Cloud Run)

Example:
    from dance_generator.config import settings

    print(settings.generator.window_length)
    print(settings.temperature.default)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from dance_generator.models.output import VisualizationMode


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="dance-generator", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class GeneratorConfig(BaseModel):
    """Generation loop configuration."""

    window_length: int = Field(
        default=30,
        ge=1,
        description="Number of poses in the model input window (W)",
    )
    pacing_ms: float = Field(
        default=30.0,
        ge=0,
        description="Pause between steps in milliseconds",
    )
    drain_timeout_sec: float = Field(
        default=2.0,
        gt=0,
        description="How long stop() waits for an in-flight step",
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for the sampling random source (None = entropy)",
    )
    log_every_n_steps: int = Field(
        default=100,
        ge=1,
        description="Log progress every N steps",
    )


class TemperatureConfig(BaseModel):
    """Temperature control range."""

    default: float = Field(default=1.0, gt=0, description="Initial temperature")
    min: float = Field(default=0.1, gt=0, description="Lowest allowed temperature")
    max: float = Field(default=2.0, gt=0, description="Highest allowed temperature")

    @model_validator(mode="after")
    def _check_range(self) -> "TemperatureConfig":
        if not self.min <= self.default <= self.max:
            raise ValueError(
                f"temperature default {self.default} outside [{self.min}, {self.max}]"
            )
        return self


class SmoothingConfig(BaseModel):
    """Temporal smoothing configuration."""

    history_size: int = Field(
        default=5,
        ge=1,
        description="Number of past poses kept for smoothing (H)",
    )
    base_weight: float = Field(
        default=0.6,
        gt=0,
        le=1.0,
        description="Weight of the most recent historical pose",
    )
    decay: float = Field(
        default=0.5,
        gt=0,
        le=1.0,
        description="Per-step decay of historical weights",
    )


class MockInferenceConfig(BaseModel):
    """Mock inference backend configuration."""

    num_mixtures: int = Field(default=3, ge=1, description="Mixture components (M)")
    amplitude: float = Field(default=6.0, ge=0, description="Sway amplitude in pixels")
    period_steps: int = Field(default=60, ge=1, description="Steps per sway cycle")
    stddev: float = Field(default=1.5, ge=0, description="Component stddev")
    latency_ms: float = Field(default=0.0, ge=0, description="Simulated inference latency")


class InferenceConfig(BaseModel):
    """Inference backend configuration."""

    backend: str = Field(
        default="mock",
        description="Inference backend: 'mock' or 'onnx'",
    )
    model_path: str = Field(
        default="./model.onnx",
        description="Path to the ONNX mixture-density model",
    )
    input_name: str = Field(
        default="input_sequence",
        description="Name of the model input tensor",
    )
    mock: MockInferenceConfig = Field(default_factory=MockInferenceConfig)


class SeedConfig(BaseModel):
    """Seed sequence configuration."""

    path: Optional[str] = Field(
        default="./seed_sequence.json",
        description="Path to seed JSON ({'sequence': [[...], ...]})",
    )
    num_keypoints: int = Field(
        default=33,
        ge=1,
        description="Keypoints per pose for the default seed",
    )
    fallback_to_default: bool = Field(
        default=True,
        description="Use the placeholder stick figure if the file is missing",
    )


class OutputConfig(BaseModel):
    """Pose output configuration."""

    subscriber_queue_size: int = Field(
        default=8,
        ge=1,
        description="Max queued frames per stream subscriber",
    )
    visualization_mode: VisualizationMode = Field(
        default=VisualizationMode.SKELETON,
        description="Initial visualization mode passed to renderers",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the dance generator.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    temperature: TemperatureConfig = Field(default_factory=TemperatureConfig)
    smoothing: SmoothingConfig = Field(default_factory=SmoothingConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Inference settings
    if env_backend := os.environ.get("DANCEGEN_INFERENCE_BACKEND"):
        config_data.setdefault("inference", {})["backend"] = env_backend
    if env_model := os.environ.get("DANCEGEN_MODEL_PATH"):
        config_data.setdefault("inference", {})["model_path"] = env_model

    # Seed settings
    if env_seed := os.environ.get("DANCEGEN_SEED_PATH"):
        config_data.setdefault("seed", {})["path"] = env_seed

    # Generator settings
    if env_window := os.environ.get("DANCEGEN_WINDOW_LENGTH"):
        config_data.setdefault("generator", {})["window_length"] = int(env_window)
    if env_pacing := os.environ.get("DANCEGEN_PACING_MS"):
        config_data.setdefault("generator", {})["pacing_ms"] = float(env_pacing)
    if env_rng := os.environ.get("DANCEGEN_RANDOM_SEED"):
        config_data.setdefault("generator", {})["random_seed"] = int(env_rng)
    if env_temp := os.environ.get("DANCEGEN_TEMPERATURE"):
        config_data.setdefault("temperature", {})["default"] = float(env_temp)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("DANCEGEN_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("DANCEGEN_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
