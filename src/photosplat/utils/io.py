"""I/O utilities: collision-free output files, streamed Gaussian PLY writer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

import numpy as np

from photosplat.utils.encoding import VERTEX_DTYPE, VERTEX_PROPERTIES, encode_vertex_records

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_BYTES = 4 * 1024 * 1024


def create_unique_file(directory: Path, base_name: str, suffix: str = ".ply") -> tuple[Path, BinaryIO]:
    """Create and open ``<base><suffix>``, or the first free ``<base>_<n><suffix>`` (n = 1, 2, ...).

    Each candidate is opened with exclusive-create mode, so a file that
    appears between choosing a name and opening it is never truncated.
    The caller owns the returned handle.
    """
    candidate = directory / f"{base_name}{suffix}"
    counter = 1
    while True:
        try:
            return candidate, open(candidate, "xb")
        except FileExistsError:
            candidate = directory / f"{base_name}_{counter}{suffix}"
            counter += 1


def gaussian_ply_header(num_vertices: int) -> bytes:
    lines = [
        "ply",
        "format binary_little_endian 1.0",
        f"element vertex {num_vertices}",
        *(f"property float {name}" for name in VERTEX_PROPERTIES),
        "end_header",
    ]
    return ("\n".join(lines) + "\n").encode("ascii")


def write_gaussian_records(
    f: BinaryIO,
    means: np.ndarray,
    scales: np.ndarray,
    quaternions: np.ndarray,
    colors: np.ndarray,
    opacities: np.ndarray,
    chunk_bytes: int = DEFAULT_CHUNK_BYTES,
) -> int:
    """Stream header and vertex records into an open binary file.

    Records are encoded and flushed ``chunk_bytes`` at a time so peak memory is
    bounded regardless of point count. Returns the number of bytes written.
    """
    n = len(means)
    per_chunk = max(1, chunk_bytes // VERTEX_DTYPE.itemsize)
    header = gaussian_ply_header(n)
    f.write(header)
    written = len(header)

    for start in range(0, n, per_chunk):
        stop = min(start + per_chunk, n)
        records = encode_vertex_records(
            means[start:stop],
            scales[start:stop],
            quaternions[start:stop],
            colors[start:stop],
            opacities[start:stop],
        )
        f.write(records.tobytes())
        written += records.nbytes
    return written


def write_gaussian_ply(
    directory: Path,
    base_name: str,
    means: np.ndarray,
    scales: np.ndarray,
    quaternions: np.ndarray,
    colors: np.ndarray,
    opacities: np.ndarray,
    chunk_bytes: int = DEFAULT_CHUNK_BYTES,
) -> tuple[Path, int]:
    """Write world-space Gaussians to a new binary little-endian PLY in ``directory``.

    The file is named by create_unique_file and never replaces an existing one.
    Returns (path, bytes written). Raises OSError on write failure; a partially
    written file is left in place.
    """
    path, f = create_unique_file(directory, base_name)
    with f:
        written = write_gaussian_records(f, means, scales, quaternions, colors, opacities, chunk_bytes)
    logger.info(f"Wrote {len(means)} vertices ({written} bytes) -> {path}")
    return path, written
