"""Color / opacity / scale encodings for 3DGS-style PLY records."""

from __future__ import annotations

import numpy as np

SH_C0 = float(np.sqrt(1.0 / (4.0 * np.pi)))
OPACITY_EPS = 1e-6
MIN_SCALE = 1e-8

# Vertex layout: 14 little-endian float32 per point, in file order.
VERTEX_PROPERTIES: tuple[str, ...] = (
    "x", "y", "z",
    "f_dc_0", "f_dc_1", "f_dc_2",
    "opacity",
    "scale_0", "scale_1", "scale_2",
    "rot_0", "rot_1", "rot_2", "rot_3",
)
VERTEX_DTYPE = np.dtype([(name, "<f4") for name in VERTEX_PROPERTIES])


def linear_to_srgb(c: np.ndarray) -> np.ndarray:
    """sRGB transfer function (linear -> gamma encoded)."""
    c = np.asarray(c, dtype=np.float64)
    # Negative inputs take the linear branch, so the power never sees them.
    return np.where(
        c <= 0.0031308,
        12.92 * c,
        1.055 * np.power(np.maximum(c, 0.0031308), 1.0 / 2.4) - 0.055,
    )


def rgb_to_sh(rgb: np.ndarray) -> np.ndarray:
    """Map gamma-encoded color to the degree-0 spherical harmonic coefficient."""
    return (np.asarray(rgb, dtype=np.float64) - 0.5) / SH_C0


def sh_to_rgb(sh0: np.ndarray) -> np.ndarray:
    return np.asarray(sh0, dtype=np.float64) * SH_C0 + 0.5


def sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))


def inverse_sigmoid(x: np.ndarray) -> np.ndarray:
    """Logit with the input clamped to [1e-6, 1 - 1e-6]."""
    c = np.clip(np.asarray(x, dtype=np.float64), OPACITY_EPS, 1.0 - OPACITY_EPS)
    return np.log(c / (1.0 - c))


def log_scale(scales: np.ndarray) -> np.ndarray:
    return np.log(np.maximum(np.asarray(scales, dtype=np.float64), MIN_SCALE))


def encode_vertex_records(
    means: np.ndarray,
    scales: np.ndarray,
    quaternions: np.ndarray,
    colors: np.ndarray,
    opacities: np.ndarray,
) -> np.ndarray:
    """Pack a slice of world-space Gaussians into PLY vertex records."""
    n = len(means)
    records = np.empty(n, dtype=VERTEX_DTYPE)
    records["x"] = means[:, 0]
    records["y"] = means[:, 1]
    records["z"] = means[:, 2]

    f_dc = rgb_to_sh(linear_to_srgb(colors))
    records["f_dc_0"] = f_dc[:, 0]
    records["f_dc_1"] = f_dc[:, 1]
    records["f_dc_2"] = f_dc[:, 2]

    records["opacity"] = inverse_sigmoid(opacities)

    log_s = log_scale(scales)
    records["scale_0"] = log_s[:, 0]
    records["scale_1"] = log_s[:, 1]
    records["scale_2"] = log_s[:, 2]

    records["rot_0"] = quaternions[:, 0]
    records["rot_1"] = quaternions[:, 1]
    records["rot_2"] = quaternions[:, 2]
    records["rot_3"] = quaternions[:, 3]
    return records
