"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ModelIncompatible

ElementType = Literal["float16", "float32", "float64"]

# Per-point stride of each model output, in PLY record order of use.
OUTPUT_STRIDES: dict[str, int] = {
    "mean_vectors": 3,
    "singular_values": 3,
    "quaternions": 4,
    "colors": 3,
    "opacities": 1,
}


class TensorSpec(BaseModel):
    """Declared shape and element type of one named model input/output."""

    name: str
    shape: list[int] = Field(default_factory=list, description="Declared shape (-1 = symbolic dim)")
    element_type: ElementType = "float32"
    kind: Literal["tensor", "scalar"] = "tensor"

    @property
    def resolved_shape(self) -> list[int]:
        """Declared shape with symbolic (non-positive) dims bound to 1."""
        return [d if d > 0 else 1 for d in self.shape]

    @property
    def element_count(self) -> int:
        if self.kind == "scalar":
            return 1
        return math.prod(self.resolved_shape)


class ModelIOSpec(BaseModel):
    """Reflected model signature, fetched once per model load."""

    inputs: dict[str, TensorSpec] = Field(default_factory=dict)
    outputs: dict[str, TensorSpec] = Field(default_factory=dict)

    def image_spec(self) -> TensorSpec:
        spec = self.inputs.get("image")
        if spec is None or spec.kind != "tensor":
            raise ModelIncompatible("Missing required input: image")
        return spec

    def target_size(self) -> tuple[int, int]:
        """Return the (width, height) the model expects for its ``image`` input."""
        spec = self.image_spec()
        if len(spec.shape) < 2:
            raise ModelIncompatible(f"Input 'image' must have rank >= 2, got shape {spec.shape}")
        height, width = spec.shape[-2], spec.shape[-1]
        if height <= 0 or width <= 0:
            raise ModelIncompatible(
                f"Input 'image' must declare positive height/width, got shape {spec.shape}"
            )
        return width, height


class GaussianSet(BaseModel):
    """Parallel per-point Gaussian parameters (camera or world space).

    Arrays are float32 with shapes (N,3), (N,3), (N,4), (N,3), (N,).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    means: np.ndarray
    scales: np.ndarray
    quaternions: np.ndarray
    colors: np.ndarray
    opacities: np.ndarray

    @model_validator(mode="after")
    def _check_shapes(self) -> GaussianSet:
        n = self.means.shape[0] if self.means.ndim == 2 else -1
        expected = {
            "means": (n, 3),
            "scales": (n, 3),
            "quaternions": (n, 4),
            "colors": (n, 3),
            "opacities": (n,),
        }
        for field, shape in expected.items():
            arr = getattr(self, field)
            if n < 0 or arr.shape != shape:
                raise ValueError(f"{field} has shape {arr.shape}, expected {shape}")
        return self

    @classmethod
    def from_flat(
        cls,
        mean_vectors: np.ndarray,
        singular_values: np.ndarray,
        quaternions: np.ndarray,
        colors: np.ndarray,
        opacities: np.ndarray,
    ) -> GaussianSet:
        """Build from flat model outputs, checking that all point counts agree."""
        flat = {
            "mean_vectors": np.asarray(mean_vectors, dtype=np.float32).ravel(),
            "singular_values": np.asarray(singular_values, dtype=np.float32).ravel(),
            "quaternions": np.asarray(quaternions, dtype=np.float32).ravel(),
            "colors": np.asarray(colors, dtype=np.float32).ravel(),
            "opacities": np.asarray(opacities, dtype=np.float32).ravel(),
        }
        n = flat["mean_vectors"].size // 3
        for name, stride in OUTPUT_STRIDES.items():
            if flat[name].size != n * stride:
                raise ModelIncompatible(
                    f"Output '{name}' has {flat[name].size} values, expected {n * stride} "
                    f"({n} points x {stride})"
                )
        return cls(
            means=flat["mean_vectors"].reshape(n, 3),
            scales=flat["singular_values"].reshape(n, 3),
            quaternions=flat["quaternions"].reshape(n, 4),
            colors=flat["colors"].reshape(n, 3),
            opacities=flat["opacities"].reshape(n),
        )

    @property
    def num_points(self) -> int:
        return int(self.means.shape[0])

    def __len__(self) -> int:
        return self.num_points


class ModelConfig(BaseModel):
    """Which inference engine to load and from where."""

    backend: Literal["onnxruntime", "mock"] = Field(
        "onnxruntime", description="Inference backend: onnxruntime|mock"
    )
    path: Path = Field(Path("models/sharp.onnx"), description="Path to the exported model")
    providers: list[str] = Field(
        default_factory=lambda: ["CPUExecutionProvider"],
        description="onnxruntime execution providers, in priority order",
    )
    mock_points: int = Field(100, gt=0, description="Number of synthetic points for the mock backend")
    mock_input_size: int = Field(64, gt=0, description="Square input resolution declared by the mock backend")


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "photosplat"
    data_root: Path = Path("./data")
    model: ModelConfig = Field(default_factory=ModelConfig)
    steps: dict[str, dict | str] = Field(
        default_factory=dict,
        description="Per-step config keyed by step name: inline mapping or path to a YAML file",
    )
