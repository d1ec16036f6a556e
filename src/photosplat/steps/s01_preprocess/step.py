"""Step 01: Load, orient, and resample the source photograph for the model."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import ClassVar

import numpy as np
from PIL import Image, UnidentifiedImageError

from photosplat.core.errors import ImageLoadFailed, ImageProcessingFailed
from photosplat.core.step_base import BaseStep
from ._exif import (
    apply_orientation,
    estimate_focal_mm,
    focal_mm_to_px,
    read_focal_lengths,
    read_orientation,
)
from ._resample import resize_bilinear_align_corners, to_channel_planar
from .config import PreprocessConfig
from .contracts import PreprocessInput, PreprocessOutput

logger = logging.getLogger(__name__)


def _read_source_bytes(image_path: Path) -> bytes:
    """Read the whole file; the handle is released on every exit path."""
    try:
        with open(image_path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ImageLoadFailed(f"Failed to load image: {image_path} ({e})") from e


def _decode(data: bytes, image_path: Path) -> tuple[Image.Image, Image.Exif]:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        exif = image.getexif()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        raise ImageLoadFailed(f"Failed to load image: {image_path} ({e})") from e
    return image, exif


class PreprocessStep(BaseStep[PreprocessInput, PreprocessOutput, PreprocessConfig]):
    """Decode the photo, correct EXIF orientation, estimate focal length in
    pixels, and resample to the model's input resolution.
    """

    name: ClassVar[str] = "preprocess"
    input_type: ClassVar = PreprocessInput
    output_type: ClassVar = PreprocessOutput
    config_type: ClassVar = PreprocessConfig

    def validate_inputs(self, inputs: PreprocessInput) -> bool:
        # Missing files surface as ImageLoadFailed from run().
        return inputs.target_width > 0 and inputs.target_height > 0

    def run(self, inputs: PreprocessInput) -> PreprocessOutput:
        cfg = self.config
        data = _read_source_bytes(inputs.image_path)
        image, exif = _decode(data, inputs.image_path)

        try:
            focal_35mm, focal_mm = read_focal_lengths(exif)
            orientation = read_orientation(exif) if cfg.apply_exif_orientation else 1
        except (KeyError, TypeError, ValueError, OSError) as e:
            raise ImageLoadFailed(f"Failed to read image metadata: {inputs.image_path} ({e})") from e

        try:
            oriented = apply_orientation(image) if cfg.apply_exif_orientation else image
            rgb = oriented if oriented.mode == "RGB" else oriented.convert("RGB")
        except (OSError, ValueError) as e:
            raise ImageProcessingFailed(f"Failed to orient/convert image ({e})") from e

        original_width, original_height = rgb.size
        logger.info(
            f"Loaded {inputs.image_path.name}: {original_width}x{original_height}, "
            f"mode={image.mode}, orientation={orientation}"
        )

        focal_mm_equiv = estimate_focal_mm(
            focal_35mm,
            focal_mm,
            default_focal_mm=cfg.default_focal_mm,
            small_focal_threshold_mm=cfg.small_focal_threshold_mm,
            crop_factor=cfg.crop_factor,
        )
        focal_length_px = focal_mm_to_px(focal_mm_equiv, original_width, original_height)
        logger.info(
            f"Focal length: exif35={focal_35mm}, exif={focal_mm} -> "
            f"{focal_mm_equiv:.2f}mm equiv, {focal_length_px:.1f}px"
        )

        try:
            pixels = np.asarray(rgb, dtype=np.float32) / 255.0
            resized = resize_bilinear_align_corners(
                pixels, inputs.target_width, inputs.target_height
            )
            tensor = to_channel_planar(np.clip(resized, 0.0, 1.0))
        except (ValueError, MemoryError) as e:
            raise ImageProcessingFailed(f"Failed to resample image ({e})") from e

        expected = 3 * inputs.target_width * inputs.target_height
        if tensor.size != expected:
            raise ImageProcessingFailed(
                f"Resampled tensor has {tensor.size} values, expected {expected}"
            )

        return PreprocessOutput(
            tensor=tensor,
            focal_length_px=float(focal_length_px),
            original_width=original_width,
            original_height=original_height,
        )
