"""
Configuration Tests
===================

Tests for YAML loading, environment overrides and validation.
"""

import pytest
from pydantic import ValidationError

from dance_generator.config import Settings, TemperatureConfig, load_config
from dance_generator.models.output import VisualizationMode


ENV_VARS = [
    "DANCEGEN_INFERENCE_BACKEND",
    "DANCEGEN_MODEL_PATH",
    "DANCEGEN_SEED_PATH",
    "DANCEGEN_WINDOW_LENGTH",
    "DANCEGEN_PACING_MS",
    "DANCEGEN_RANDOM_SEED",
    "DANCEGEN_TEMPERATURE",
    "DANCEGEN_PORT",
    "DANCEGEN_LOG_LEVEL",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        config = Settings()

        assert config.generator.window_length == 30
        assert config.generator.pacing_ms == 30.0
        assert config.temperature.default == 1.0
        assert config.smoothing.history_size == 5
        assert config.smoothing.base_weight == 0.6
        assert config.smoothing.decay == 0.5
        assert config.inference.backend == "mock"
        assert config.output.visualization_mode is VisualizationMode.SKELETON


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "generator:\n"
            "  window_length: 12\n"
            "  pacing_ms: 50\n"
            "smoothing:\n"
            "  history_size: 3\n"
            "output:\n"
            "  visualization_mode: sprite\n"
        )

        config = load_config(str(path))

        assert config.generator.window_length == 12
        assert config.generator.pacing_ms == 50.0
        assert config.smoothing.history_size == 3
        assert config.output.visualization_mode is VisualizationMode.SPRITE

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(str(path))

        assert config.generator.window_length == 30

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("generator:\n  window_length: 12\n")
        monkeypatch.setenv("DANCEGEN_WINDOW_LENGTH", "40")
        monkeypatch.setenv("DANCEGEN_TEMPERATURE", "1.5")
        monkeypatch.setenv("DANCEGEN_RANDOM_SEED", "7")
        monkeypatch.setenv("DANCEGEN_SEED_PATH", "/data/seed.json")

        config = load_config(str(path))

        assert config.generator.window_length == 40
        assert config.temperature.default == 1.5
        assert config.generator.random_seed == 7
        assert config.seed.path == "/data/seed.json"

    def test_port_precedence(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DANCEGEN_PORT", "9000")
        monkeypatch.setenv("PORT", "8080")

        config = load_config(str(tmp_path / "absent.yaml"))

        assert config.server.port == 8080

    def test_invalid_window_length(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DANCEGEN_WINDOW_LENGTH", "0")

        with pytest.raises(ValidationError):
            load_config(str(tmp_path / "absent.yaml"))


class TestTemperatureConfig:
    """Tests for the temperature range validator."""

    def test_default_outside_range(self):
        with pytest.raises(ValidationError):
            TemperatureConfig(default=3.0, min=0.1, max=2.0)

    def test_non_positive_default(self):
        with pytest.raises(ValidationError):
            TemperatureConfig(default=0.0)

    def test_custom_range(self):
        config = TemperatureConfig(default=0.5, min=0.2, max=0.8)
        assert (config.min, config.default, config.max) == (0.2, 0.5, 0.8)
