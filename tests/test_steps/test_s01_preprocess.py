"""Tests for S01: Image preprocessing step."""

import math
from pathlib import Path

import numpy as np
import pytest
from PIL import ExifTags, Image

from photosplat.core.errors import ImageLoadFailed
from photosplat.steps.s01_preprocess._exif import (
    SENSOR_DIAGONAL_MM,
    estimate_focal_mm,
    focal_mm_to_px,
    read_focal_lengths,
    read_orientation,
)
from photosplat.steps.s01_preprocess._resample import (
    resize_bilinear_align_corners,
    to_channel_planar,
)
from photosplat.steps.s01_preprocess.config import PreprocessConfig
from photosplat.steps.s01_preprocess.contracts import PreprocessInput
from photosplat.steps.s01_preprocess.step import PreprocessStep


class _FakeExif(dict):
    """Stands in for PIL.Image.Exif: base tags plus an Exif sub-IFD."""

    def __init__(self, base=None, exif_ifd=None):
        super().__init__(base or {})
        self._exif_ifd = exif_ifd or {}

    def get_ifd(self, tag):
        return self._exif_ifd if tag == ExifTags.IFD.Exif else {}


# ---------------------------------------------------------------------------
# A. Focal length estimation
# ---------------------------------------------------------------------------

class TestFocalLength:
    def test_prefers_35mm_equivalent(self):
        assert estimate_focal_mm(26.0, 4.2) == 26.0

    def test_35mm_below_one_is_ignored(self):
        assert estimate_focal_mm(0.0, 50.0) == 50.0

    def test_small_raw_focal_gets_crop_factor(self):
        assert estimate_focal_mm(None, 4.2) == pytest.approx(4.2 * 8.4)

    def test_default_when_absent(self):
        assert estimate_focal_mm(None, None) == 30.0

    def test_mm_to_px(self):
        px = focal_mm_to_px(36.0, 3000, 4000)
        assert SENSOR_DIAGONAL_MM == pytest.approx(math.sqrt(36**2 + 24**2))
        assert px == pytest.approx(36.0 * 5000.0 / SENSOR_DIAGONAL_MM)

    def test_read_from_exif_sub_ifd(self):
        exif = _FakeExif(exif_ifd={ExifTags.Base.FocalLengthIn35mmFilm: 28, ExifTags.Base.FocalLength: 4.25})
        assert read_focal_lengths(exif) == (28.0, 4.25)

    def test_read_rational_tuple_from_base_ifd(self):
        exif = _FakeExif(base={ExifTags.Base.FocalLength: (85, 2)})
        assert read_focal_lengths(exif) == (None, 42.5)

    def test_orientation_default_and_invalid(self):
        assert read_orientation(_FakeExif()) == 1
        assert read_orientation(_FakeExif(base={ExifTags.Base.Orientation: 6})) == 6
        assert read_orientation(_FakeExif(base={ExifTags.Base.Orientation: 42})) == 1


# ---------------------------------------------------------------------------
# B. Align-corners bilinear resampling
# ---------------------------------------------------------------------------

class TestResample:
    def test_to_one_by_one_is_top_left(self):
        rng = np.random.default_rng(0)
        img = rng.uniform(0, 1, (7, 9, 3))
        out = resize_bilinear_align_corners(img, 1, 1)
        assert out.shape == (1, 1, 3)
        np.testing.assert_array_equal(out[0, 0], img[0, 0])

    def test_same_size_is_identity(self):
        rng = np.random.default_rng(1)
        img = rng.uniform(0, 1, (5, 6, 3))
        np.testing.assert_allclose(resize_bilinear_align_corners(img, 6, 5), img, atol=1e-12)

    def test_corners_align(self):
        rng = np.random.default_rng(2)
        img = rng.uniform(0, 1, (4, 5, 3))
        out = resize_bilinear_align_corners(img, 11, 9)
        for (sy, sx), (dy, dx) in [((0, 0), (0, 0)), ((0, 4), (0, 10)), ((3, 0), (8, 0)), ((3, 4), (8, 10))]:
            np.testing.assert_allclose(out[dy, dx], img[sy, sx], atol=1e-12)

    def test_midpoint_is_average(self):
        img = np.array([[[0.0, 0.0, 0.0], [1.0, 0.5, 0.25]]])
        out = resize_bilinear_align_corners(img, 3, 1)
        np.testing.assert_allclose(out[0, 1], [0.5, 0.25, 0.125])

    def test_downsample_samples_exact_grid(self):
        img = np.arange(5, dtype=float).reshape(1, 5, 1).repeat(3, axis=2)
        out = resize_bilinear_align_corners(img, 3, 1)
        np.testing.assert_allclose(out[0, :, 0], [0.0, 2.0, 4.0])

    def test_channel_planar(self):
        img = np.zeros((2, 3, 3))
        img[..., 1] = 1.0
        planar = to_channel_planar(img)
        assert planar.shape == (3, 2, 3)
        assert planar.dtype == np.float32
        assert planar[1].min() == 1.0 and planar[0].max() == 0.0


# ---------------------------------------------------------------------------
# C. Step
# ---------------------------------------------------------------------------

class TestPreprocessStep:
    def test_output_shape_and_range(self, sample_image: Path, data_root: Path):
        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=sample_image, target_width=16, target_height=12))

        assert out.tensor.shape == (3, 12, 16)
        assert out.tensor.size == 3 * 16 * 12
        assert out.tensor.dtype == np.float32
        assert out.tensor.min() >= 0.0 and out.tensor.max() <= 1.0
        assert (out.original_width, out.original_height) == (40, 30)

    def test_default_focal_length(self, sample_image: Path, data_root: Path):
        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=sample_image, target_width=4, target_height=4))
        assert out.focal_length_px == pytest.approx(30.0 * 50.0 / SENSOR_DIAGONAL_MM)

    def test_same_size_preserves_pixels(self, sample_image: Path, data_root: Path):
        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=sample_image, target_width=40, target_height=30))
        expected = np.asarray(Image.open(sample_image), dtype=np.float32) / 255.0
        np.testing.assert_allclose(out.tensor, expected.transpose(2, 0, 1), atol=1e-6)

    def test_exif_orientation_applied(self, tmp_path: Path, data_root: Path):
        # 2x1 image, red on the left; orientation 6 means rotate 90 deg clockwise.
        pixels = np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8)
        exif = Image.Exif()
        exif[ExifTags.Base.Orientation] = 6
        path = tmp_path / "rotated.png"
        Image.fromarray(pixels).save(path, exif=exif.tobytes())

        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=path, target_width=1, target_height=2))

        assert (out.original_width, out.original_height) == (1, 2)
        np.testing.assert_allclose(out.tensor[:, 0, 0], [1.0, 0.0, 0.0])
        np.testing.assert_allclose(out.tensor[:, 1, 0], [0.0, 0.0, 1.0])

    def test_exif_upside_down_rotated_back(self, tmp_path: Path, data_root: Path):
        pixels = np.array([[[255, 0, 0], [0, 255, 0]], [[0, 0, 255], [255, 255, 255]]], dtype=np.uint8)
        exif = Image.Exif()
        exif[ExifTags.Base.Orientation] = 3
        path = tmp_path / "upside_down.png"
        Image.fromarray(pixels).save(path, exif=exif.tobytes())

        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=path, target_width=2, target_height=2))

        expected = pixels[::-1, ::-1].astype(np.float32) / 255.0
        np.testing.assert_allclose(out.tensor, expected.transpose(2, 0, 1), atol=1e-6)

    def test_orientation_ignored_when_disabled(self, tmp_path: Path, data_root: Path):
        pixels = np.zeros((1, 2, 3), dtype=np.uint8)
        exif = Image.Exif()
        exif[ExifTags.Base.Orientation] = 6
        path = tmp_path / "rotated.png"
        Image.fromarray(pixels).save(path, exif=exif.tobytes())

        step = PreprocessStep(config=PreprocessConfig(apply_exif_orientation=False), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=path, target_width=2, target_height=1))
        assert (out.original_width, out.original_height) == (2, 1)

    def test_grayscale_and_alpha_converted(self, tmp_path: Path, data_root: Path):
        path = tmp_path / "rgba.png"
        Image.new("RGBA", (5, 4), (10, 20, 30, 0)).save(path)
        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        out = step.execute(PreprocessInput(image_path=path, target_width=5, target_height=4))
        np.testing.assert_allclose(out.tensor[:, 0, 0], np.array([10, 20, 30]) / 255.0, atol=1e-6)

    def test_missing_file(self, data_root: Path):
        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        with pytest.raises(ImageLoadFailed):
            step.execute(PreprocessInput(image_path=Path("/nonexistent/photo.jpg"), target_width=4, target_height=4))

    def test_not_an_image(self, tmp_path: Path, data_root: Path):
        path = tmp_path / "notes.jpg"
        path.write_text("definitely not a jpeg")
        step = PreprocessStep(config=PreprocessConfig(), data_root=data_root)
        with pytest.raises(ImageLoadFailed):
            step.execute(PreprocessInput(image_path=path, target_width=4, target_height=4))
