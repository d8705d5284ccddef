"""
ONNX Inference Engine
=====================

Inference engine backed by a pretrained ONNX mixture-density network.

Model Contract:
    input:  "input_sequence"  float32 [1, W, D]
    output: "pi"              [1, M]       component weights
            "mu"              [1, M, D]    component means (or [1, M*D])
            "sigma"           [1, M, D]    component stddevs (or [1, M*D])

This engine:
    - Loads the model once with onnxruntime on the CPU provider
    - Runs the session in a worker thread so the event loop stays free
    - Validates output sizes before handing them to the sampler

Design Rules:
    - Fail fast on misconfiguration (missing file, missing outputs)
    - Any runtime error surfaces as InferenceFailure
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from dance_generator.errors import InferenceFailure
from dance_generator.models.prediction import MixturePrediction


logger = logging.getLogger(__name__)


OUTPUT_NAMES = ("pi", "mu", "sigma")


class OnnxInferenceEngine:
    """
    Mixture-density inference with onnxruntime.

    Attributes:
        model_path: Path to the .onnx file
        input_name: Name of the sequence input tensor
        providers: onnxruntime execution providers
    """

    def __init__(
        self,
        model_path: str,
        input_name: str = "input_sequence",
        providers: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize ONNX inference engine.

        Args:
            model_path: Path to the ONNX model file
            input_name: Model input tensor name
            providers: Execution providers (default: CPU only)

        Raises:
            ImportError: If onnxruntime is not installed
            FileNotFoundError: If the model file does not exist
            InferenceFailure: If the session cannot be created or the
                model lacks the expected outputs
        """
        self.model_path = model_path
        self.input_name = input_name
        self.providers = providers or ["CPUExecutionProvider"]

        self._session = None
        self._run_count: int = 0
        self._init_session()

        logger.info(
            f"OnnxInferenceEngine initialized: model={model_path}, "
            f"providers={self.providers}"
        )

    def _init_session(self) -> None:
        """Create the onnxruntime session."""
        if not Path(self.model_path).exists():
            raise FileNotFoundError(f"ONNX model not found: {self.model_path}")

        try:
            import onnxruntime as ort
        except ImportError:
            raise ImportError(
                "onnxruntime is required for OnnxInferenceEngine. "
                "Install with: pip install 'dance-generator[onnx]'"
            )

        try:
            options = ort.SessionOptions()
            options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
            self._session = ort.InferenceSession(
                self.model_path,
                sess_options=options,
                providers=self.providers,
            )
        except Exception as e:
            raise InferenceFailure(f"Failed to load ONNX model: {e}") from e

        output_names = {o.name for o in self._session.get_outputs()}
        missing = [name for name in OUTPUT_NAMES if name not in output_names]
        if missing:
            raise InferenceFailure(f"ONNX model lacks outputs: {missing}")

    @property
    def run_count(self) -> int:
        """Number of successful session runs."""
        return self._run_count

    def _run(self, batch: np.ndarray) -> MixturePrediction:
        pi, mu, sigma = self._session.run(
            list(OUTPUT_NAMES),
            {self.input_name: batch},
        )
        return MixturePrediction.from_arrays(pi, mu, sigma)

    async def predict(self, window: Sequence[np.ndarray]) -> MixturePrediction:
        """
        Run the model on the current window.

        Args:
            window: W FlatVectors of dimensionality D

        Returns:
            MixturePrediction with flattened outputs

        Raises:
            InferenceFailure: If the run fails or outputs are inconsistent
        """
        batch = np.asarray(np.stack(window), dtype=np.float32)[np.newaxis, ...]

        try:
            prediction = await asyncio.to_thread(self._run, batch)
        except Exception as e:
            raise InferenceFailure(f"ONNX inference failed: {e}") from e

        dim = batch.shape[-1]
        expected = prediction.num_mixtures * dim
        if prediction.means.size != expected or prediction.stddevs.size != expected:
            raise InferenceFailure(
                f"ONNX outputs inconsistent with D={dim}: M={prediction.num_mixtures}, "
                f"mu={prediction.means.size}, sigma={prediction.stddevs.size}"
            )

        self._run_count += 1
        return prediction
