"""Align-corners bilinear resampling on (H, W, C) float arrays."""

from __future__ import annotations

import numpy as np


def _sample_coords(src: int, dst: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Source indices (lo, hi) and fractional weights for each destination index."""
    scale = 0.0 if dst == 1 else (src - 1) / (dst - 1)
    coords = np.arange(dst, dtype=np.float64) * scale
    lo = np.minimum(np.floor(coords).astype(np.int64), src - 1)
    hi = np.minimum(lo + 1, src - 1)
    frac = coords - lo
    return lo, hi, frac


def resize_bilinear_align_corners(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resample ``image`` (H, W, C) to (height, width, C).

    The corner pixels of source and destination map onto each other exactly. A
    destination axis of size 1 samples the first source row/column.
    """
    if image.ndim != 3:
        raise ValueError(f"Expected (H, W, C) image, got shape {image.shape}")
    src_h, src_w = image.shape[:2]
    if src_h == 0 or src_w == 0 or width <= 0 or height <= 0:
        raise ValueError(f"Cannot resample {src_w}x{src_h} to {width}x{height}")

    img = image.astype(np.float64, copy=False)
    y0, y1, wy = _sample_coords(src_h, height)
    x0, x1, wx = _sample_coords(src_w, width)

    wy = wy[:, None, None]
    wx = wx[None, :, None]

    top = img[y0][:, x0] * (1.0 - wx) + img[y0][:, x1] * wx
    bottom = img[y1][:, x0] * (1.0 - wx) + img[y1][:, x1] * wx
    return top * (1.0 - wy) + bottom * wy


def to_channel_planar(image: np.ndarray) -> np.ndarray:
    """(H, W, 3) -> contiguous (3, H, W) float32."""
    return np.ascontiguousarray(image.transpose(2, 0, 1), dtype=np.float32)
