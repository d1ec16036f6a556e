"""EXIF orientation and focal-length helpers."""

from __future__ import annotations

import logging
import math

from PIL import ExifTags, Image, ImageOps

logger = logging.getLogger(__name__)

# Full-frame 36x24mm sensor diagonal.
SENSOR_DIAGONAL_MM = math.sqrt(36.0 * 36.0 + 24.0 * 24.0)


def _as_float(value) -> float | None:
    if value is None:
        return None
    if isinstance(value, tuple) and len(value) == 2:
        num, den = value
        return float(num) / float(den) if den else None
    try:
        result = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return result if math.isfinite(result) else None


def read_orientation(exif: Image.Exif) -> int:
    """EXIF orientation tag, 1 (no transform) when absent or invalid."""
    value = exif.get(ExifTags.Base.Orientation, 1)
    try:
        orientation = int(value)
    except (TypeError, ValueError):
        return 1
    return orientation if 1 <= orientation <= 8 else 1


def apply_orientation(image: Image.Image) -> Image.Image:
    """Rotate/mirror so pixel data matches the intended up orientation."""
    return ImageOps.exif_transpose(image)


def read_focal_lengths(exif: Image.Exif) -> tuple[float | None, float | None]:
    """Return (focal_35mm_equivalent, raw_focal_mm) from EXIF, either may be None."""
    exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)

    def lookup(tag: int) -> float | None:
        value = exif_ifd.get(tag)
        if value is None:
            value = exif.get(tag)
        return _as_float(value)

    return lookup(ExifTags.Base.FocalLengthIn35mmFilm), lookup(ExifTags.Base.FocalLength)


def estimate_focal_mm(
    focal_35mm: float | None,
    focal_mm: float | None,
    default_focal_mm: float = 30.0,
    small_focal_threshold_mm: float = 10.0,
    crop_factor: float = 8.4,
) -> float:
    """35mm-equivalent focal length in millimetres."""
    if focal_35mm is not None and focal_35mm >= 1:
        return focal_35mm
    f = focal_mm if focal_mm is not None else default_focal_mm
    if f < small_focal_threshold_mm:
        # Phone lenses report the physical focal length of a tiny sensor.
        f *= crop_factor
    return f


def focal_mm_to_px(focal_mm: float, width: int, height: int) -> float:
    diagonal_px = math.sqrt(width * width + height * height)
    return focal_mm * diagonal_px / SENSOR_DIAGONAL_MM
