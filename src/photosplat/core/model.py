"""Inference engine handles: onnxruntime session and a synthetic mock.

A handle exposes the model's reflected ``io_spec`` (read once at load time)
and a blocking ``predict(feeds) -> {name: array}``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Protocol

import numpy as np

from .contracts import OUTPUT_STRIDES, ModelConfig, ModelIOSpec, TensorSpec
from .errors import ModelIncompatible, ModelNotFound

logger = logging.getLogger(__name__)

REQUIRED_INPUTS = ("image", "disparity_factor")

_ONNX_ELEMENT_TYPES = {
    "tensor(float16)": "float16",
    "tensor(float)": "float32",
    "tensor(double)": "float64",
}


class ModelHandle(Protocol):
    io_spec: ModelIOSpec

    def predict(self, feeds: dict[str, Any]) -> dict[str, Any]: ...


def _onnx_tensor_spec(arg) -> TensorSpec | None:
    """Translate an onnxruntime NodeArg; None if its element type is unsupported."""
    element_type = _ONNX_ELEMENT_TYPES.get(arg.type)
    if element_type is None:
        return None
    shape = [d if isinstance(d, int) and d >= 0 else -1 for d in (arg.shape or [])]
    return TensorSpec(
        name=arg.name,
        shape=shape,
        element_type=element_type,
        kind="scalar" if not shape else "tensor",
    )


class OnnxModel:
    """Model served by an onnxruntime ``InferenceSession``."""

    def __init__(self, session):
        self.session = session
        self.output_names = [o.name for o in session.get_outputs()]
        self.io_spec = self._reflect(session)

    @classmethod
    def from_path(cls, path, providers: list[str] | None = None) -> OnnxModel:
        import onnxruntime as ort

        session = ort.InferenceSession(str(path), providers=providers)
        logger.info(f"onnxruntime session on {session.get_providers()}")
        return cls(session)

    @staticmethod
    def _reflect(session) -> ModelIOSpec:
        inputs: dict[str, TensorSpec] = {}
        for arg in session.get_inputs():
            spec = _onnx_tensor_spec(arg)
            if spec is None:
                if arg.name in REQUIRED_INPUTS:
                    raise ModelIncompatible(f"Input '{arg.name}' has unsupported type {arg.type}")
                logger.warning(f"Ignoring input '{arg.name}' of unsupported type {arg.type}")
                continue
            inputs[spec.name] = spec

        outputs: dict[str, TensorSpec] = {}
        for arg in session.get_outputs():
            spec = _onnx_tensor_spec(arg)
            if spec is not None:
                outputs[spec.name] = spec
        return ModelIOSpec(inputs=inputs, outputs=outputs)

    def predict(self, feeds: dict[str, Any]) -> dict[str, Any]:
        values = self.session.run(self.output_names, feeds)
        return dict(zip(self.output_names, values))


class MockModel:
    """Synthetic model for UI and pipeline testing without weights.

    Emits ``num_points`` Gaussians on a radius-0.3 circle in the camera XY
    plane: uniform color (0.5, 0.2, 0.8), opacity 1, unit scale, identity rotation.
    """

    radius = 0.3
    color = (0.5, 0.2, 0.8)

    def __init__(self, num_points: int = 100, input_size: int = 64):
        self.num_points = num_points
        self.io_spec = ModelIOSpec(
            inputs={
                "image": TensorSpec(name="image", shape=[1, 3, input_size, input_size]),
                "disparity_factor": TensorSpec(name="disparity_factor", shape=[1]),
            },
            outputs={
                name: TensorSpec(name=name, shape=[1, num_points, stride] if stride > 1 else [1, num_points])
                for name, stride in OUTPUT_STRIDES.items()
            },
        )

    def predict(self, feeds: dict[str, Any]) -> dict[str, Any]:
        n = self.num_points
        angles = np.arange(n, dtype=np.float64) / n * 2.0 * math.pi
        means = np.zeros((1, n, 3), dtype=np.float32)
        means[0, :, 0] = np.cos(angles) * self.radius
        means[0, :, 1] = np.sin(angles) * self.radius
        quats = np.zeros((1, n, 4), dtype=np.float32)
        quats[0, :, 0] = 1.0
        return {
            "mean_vectors": means,
            "singular_values": np.ones((1, n, 3), dtype=np.float32),
            "quaternions": quats,
            "colors": np.tile(np.array(self.color, dtype=np.float32), (1, n, 1)),
            "opacities": np.ones((1, n), dtype=np.float32),
        }


def load_model(config: ModelConfig) -> ModelHandle:
    """Construct the configured model handle; raises ModelNotFound for a missing file."""
    if config.backend == "mock":
        logger.info(f"Using mock model ({config.mock_points} points)")
        return MockModel(num_points=config.mock_points, input_size=config.mock_input_size)

    if not config.path.exists():
        raise ModelNotFound(f"Model not found: {config.path}")
    logger.info(f"Loading model from {config.path}")
    model = OnnxModel.from_path(config.path, providers=config.providers)
    logger.info(
        f"Model inputs: {sorted(model.io_spec.inputs)}, outputs: {sorted(model.io_spec.outputs)}"
    )
    return model
