"""Tensor marshaling between numpy buffers and the model's declared specs."""

from __future__ import annotations

from typing import Any

import numpy as np

from photosplat.core.contracts import OUTPUT_STRIDES, GaussianSet, ModelIOSpec, TensorSpec
from photosplat.core.errors import InferenceOutputMissing, ModelIncompatible


def float32_to_float16_bits(values: np.ndarray) -> np.ndarray:
    """IEEE-754 binary32 -> binary16 bit patterns.

    The mantissa is truncated to 10 bits. Exponents below the half range flush
    to signed zero, exponents above it saturate to signed infinity.
    """
    bits = np.ascontiguousarray(values, dtype=np.float32).view(np.uint32).astype(np.int64)
    sign = (bits >> 16) & 0x8000
    exp = ((bits >> 23) & 0xFF) - 127 + 15
    mant = (bits & 0x7FFFFF) >> 13
    half = np.where(
        exp <= 0,
        sign,
        np.where(exp >= 31, sign | 0x7C00, sign | (np.clip(exp, 0, 31) << 10) | mant),
    )
    return half.astype(np.uint16)


def float32_to_float16(values: np.ndarray) -> np.ndarray:
    return float32_to_float16_bits(values).view(np.float16)


def _convert(values: np.ndarray, element_type: str) -> np.ndarray:
    if element_type == "float16":
        return float32_to_float16(values)
    if element_type == "float32":
        return np.array(values, dtype=np.float32)
    return np.array(values, dtype=np.float64)


def marshal_image(io_spec: ModelIOSpec, tensor: np.ndarray) -> np.ndarray:
    """Fill the ``image`` input according to its declared shape and type.

    Symbolic dims (e.g. a dynamic batch axis) are bound to 1.
    """
    spec = io_spec.image_spec()
    expected = spec.element_count
    actual = int(np.asarray(tensor).size)
    if expected != actual:
        raise ModelIncompatible(
            f"Input 'image' expects {expected} elements (shape {spec.shape}), got {actual}"
        )
    return _convert(np.asarray(tensor, dtype=np.float32).ravel(), spec.element_type).reshape(
        spec.resolved_shape
    )


def marshal_disparity(io_spec: ModelIOSpec, disparity_factor: float) -> np.ndarray:
    """Fill ``disparity_factor`` as a one-element tensor, or a float64 scalar."""
    spec: TensorSpec | None = io_spec.inputs.get("disparity_factor")
    if spec is None:
        raise ModelIncompatible("Missing required input: disparity_factor")
    if spec.kind == "scalar":
        return np.array(disparity_factor, dtype=np.float64)

    shape = spec.resolved_shape
    if spec.element_count != 1:
        raise ModelIncompatible(
            f"Input 'disparity_factor' must hold a single element, declared shape {spec.shape}"
        )
    return _convert(np.array([disparity_factor], dtype=np.float32), spec.element_type).reshape(shape)


def build_feeds(
    io_spec: ModelIOSpec, tensor: np.ndarray, focal_length_px: float, original_width: int
) -> dict[str, np.ndarray]:
    disparity_factor = focal_length_px / original_width
    return {
        "image": marshal_image(io_spec, tensor),
        "disparity_factor": marshal_disparity(io_spec, disparity_factor),
    }


def _as_flat_floats(value: Any, name: str) -> np.ndarray:
    if value is None:
        raise InferenceOutputMissing(name)
    try:
        arr = np.asarray(value, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise InferenceOutputMissing(name) from e
    return arr.ravel()


def extract_gaussians(outputs: dict[str, Any]) -> GaussianSet:
    """Pull the five named outputs and reshape them into a GaussianSet."""
    flat = {name: _as_flat_floats(outputs.get(name), name) for name in OUTPUT_STRIDES}
    return GaussianSet.from_flat(**flat)
