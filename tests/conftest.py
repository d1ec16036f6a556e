"""Shared pytest fixtures for photosplat tests."""

import math
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from photosplat.core.contracts import GaussianSet, ModelIOSpec, TensorSpec


class FakeModel:
    """Model handle returning canned outputs and recording the feeds it saw."""

    def __init__(self, io_spec: ModelIOSpec, outputs: dict):
        self.io_spec = io_spec
        self.outputs = outputs
        self.feeds = None
        self.calls = 0

    def predict(self, feeds: dict) -> dict:
        self.feeds = feeds
        self.calls += 1
        return self.outputs


def make_io_spec(
    width: int = 8,
    height: int = 6,
    image_type: str = "float32",
    disparity_type: str = "float32",
    disparity_kind: str = "tensor",
) -> ModelIOSpec:
    return ModelIOSpec(
        inputs={
            "image": TensorSpec(name="image", shape=[1, 3, height, width], element_type=image_type),
            "disparity_factor": TensorSpec(
                name="disparity_factor",
                shape=[] if disparity_kind == "scalar" else [1],
                element_type=disparity_type,
                kind=disparity_kind,
            ),
        }
    )


def circle_outputs(n: int = 100) -> dict:
    """Flat model outputs for n unit-scale points on a radius-0.3 circle."""
    angles = np.arange(n) / n * 2.0 * math.pi
    means = np.stack([np.cos(angles) * 0.3, np.sin(angles) * 0.3, np.zeros(n)], axis=1)
    quats = np.tile([1.0, 0.0, 0.0, 0.0], (n, 1))
    return {
        "mean_vectors": means.astype(np.float32).ravel(),
        "singular_values": np.ones(n * 3, dtype=np.float32),
        "quaternions": quats.astype(np.float32).ravel(),
        "colors": np.tile([0.5, 0.2, 0.8], n).astype(np.float32),
        "opacities": np.ones(n, dtype=np.float32),
    }


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root."""
    root = tmp_path / "data"
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def circle_gaussians() -> GaussianSet:
    """100 camera-space Gaussians on a circle: color (0.5, 0.2, 0.8), opacity 1, unit scale."""
    return GaussianSet.from_flat(**circle_outputs(100))


@pytest.fixture
def fake_model():
    """Factory: fake_model(outputs=None, **io_spec_kwargs) -> FakeModel."""

    def _make(outputs: dict | None = None, **spec_kwargs) -> FakeModel:
        return FakeModel(make_io_spec(**spec_kwargs), outputs if outputs is not None else circle_outputs(10))

    return _make


@pytest.fixture
def sample_image(tmp_path: Path) -> Path:
    """A 40x30 RGB gradient PNG."""
    h, w = 30, 40
    y, x = np.mgrid[0:h, 0:w]
    rgb = np.stack([x * 255 // (w - 1), y * 255 // (h - 1), np.full_like(x, 128)], axis=-1)
    path = tmp_path / "photo.png"
    Image.fromarray(rgb.astype(np.uint8)).save(path)
    return path
