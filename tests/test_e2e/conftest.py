"""Fixtures for E2E generation tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import ExifTags, Image


def create_synthetic_photo(
    output_dir: Path,
    resolution: tuple[int, int] = (200, 150),
    focal_35mm: int | None = None,
) -> Path:
    """
    Write a JPEG with a gradient + noise pattern and optional EXIF focal length.

    Args:
        output_dir: Directory to save the photo
        resolution: Image size as (width, height)
        focal_35mm: FocalLengthIn35mmFilm tag to embed, if any

    Returns:
        Path to the created JPEG
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    width, height = resolution
    rng = np.random.default_rng(42)

    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)
    frame[:, :, 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, np.newaxis]
    frame = np.clip(frame + rng.integers(0, 30, frame.shape), 0, 255).astype(np.uint8)

    photo_path = output_dir / "synthetic_photo.jpg"
    image = Image.fromarray(frame)
    if focal_35mm is None:
        image.save(photo_path, quality=95)
    else:
        exif = Image.Exif()
        exif[ExifTags.Base.FocalLengthIn35mmFilm] = focal_35mm
        image.save(photo_path, quality=95, exif=exif)
    return photo_path


@pytest.fixture
def synthetic_photo(tmp_path: Path) -> Path:
    """A 200x150 JPEG taken with a (pretend) 26mm-equivalent lens."""
    return create_synthetic_photo(tmp_path / "photos", focal_35mm=26)
