"""3D geometry utilities: quaternions and Gaussian unprojection."""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

_MIN_VARIANCE = 1e-20
_MIN_FOCAL_PX = 1e-6


def qvec2rotmat(qvec: list[float] | np.ndarray) -> np.ndarray:
    """Convert quaternion (w, x, y, z) to 3x3 rotation matrix."""
    w, x, y, z = qvec
    return np.array([
        [1 - 2*y*y - 2*z*z, 2*x*y - 2*w*z, 2*x*z + 2*w*y],
        [2*x*y + 2*w*z, 1 - 2*x*x - 2*z*z, 2*y*z - 2*w*x],
        [2*x*z - 2*w*y, 2*y*z + 2*w*x, 1 - 2*x*x - 2*y*y],
    ])


def normalize_quaternions(quats: np.ndarray) -> np.ndarray:
    """Normalize (N, 4) quaternions; zero-length rows become identity."""
    q = np.asarray(quats, dtype=np.float64).reshape(-1, 4)
    norms = np.linalg.norm(q, axis=1, keepdims=True)
    degenerate = ~np.isfinite(norms[:, 0]) | (norms[:, 0] <= 0.0)
    safe = np.where(norms > 0.0, norms, 1.0)
    out = q / safe
    out[degenerate] = (1.0, 0.0, 0.0, 0.0)
    return out


def quaternions_to_rotmats(quats: np.ndarray) -> np.ndarray:
    """Batched qvec2rotmat: (N, 4) (w, x, y, z) -> (N, 3, 3)."""
    q = normalize_quaternions(quats)
    w, x, y, z = q[:, 0], q[:, 1], q[:, 2], q[:, 3]
    R = np.empty((len(q), 3, 3), dtype=np.float64)
    R[:, 0, 0] = 1 - 2*y*y - 2*z*z
    R[:, 0, 1] = 2*x*y - 2*w*z
    R[:, 0, 2] = 2*x*z + 2*w*y
    R[:, 1, 0] = 2*x*y + 2*w*z
    R[:, 1, 1] = 1 - 2*x*x - 2*z*z
    R[:, 1, 2] = 2*y*z - 2*w*x
    R[:, 2, 0] = 2*x*z - 2*w*y
    R[:, 2, 1] = 2*y*z + 2*w*x
    R[:, 2, 2] = 1 - 2*x*x - 2*y*y
    return R


def unprojection_axes(
    focal_length_px: float, original_width: int, original_height: int
) -> np.ndarray:
    """Per-axis world scale (ax, ay, az) for NDC-space Gaussians.

    ax = W / (2f), ay = H / (2f), az = 1.
    """
    f = float(focal_length_px)
    if not np.isfinite(f) or f < _MIN_FOCAL_PX:
        logger.warning(f"Degenerate focal length {focal_length_px}, clamping to {_MIN_FOCAL_PX}")
        f = _MIN_FOCAL_PX
    return np.array([
        original_width / (2.0 * f),
        original_height / (2.0 * f),
        1.0,
    ])


def unproject_means(means: np.ndarray, axes: np.ndarray) -> np.ndarray:
    """Scale x/y of (N, 3) means; z passes through."""
    return (np.asarray(means, dtype=np.float64) * axes[None, :]).astype(np.float32)


def unproject_scales(scales: np.ndarray, quats: np.ndarray, axes: np.ndarray) -> np.ndarray:
    """Transform oriented ellipsoid extents under the anisotropic scaling ``diag(axes)``.

    With R the Gaussian's rotation and A = diag(axes), M = R^T A R expresses the
    scaling in the Gaussian's local frame. The new extent along local axis j is
    sqrt(sum_k M[k, j]^2 * s_k^2), floored at sqrt(1e-20).
    """
    s = np.maximum(np.asarray(scales, dtype=np.float64).reshape(-1, 3), 0.0)
    R = quaternions_to_rotmats(quats)
    AR = axes[None, :, None] * R
    M = np.einsum("nki,nkj->nij", R, AR)
    v = np.einsum("nkj,nk->nj", M * M, s * s)
    return np.sqrt(np.maximum(v, _MIN_VARIANCE)).astype(np.float32)
