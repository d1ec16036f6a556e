"""I/O contracts for Step 01: Image preprocessing."""

from pathlib import Path

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class PreprocessInput(BaseModel):
    image_path: Path = Field(..., description="Source photograph")
    target_width: int = Field(..., gt=0, description="Model input width in pixels")
    target_height: int = Field(..., gt=0, description="Model input height in pixels")


class PreprocessOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tensor: np.ndarray = Field(..., description="(3, H, W) float32, channel planar, values in [0, 1]")
    focal_length_px: float = Field(..., description="Estimated focal length in original-image pixels")
    original_width: int = Field(..., description="Width after EXIF orientation")
    original_height: int = Field(..., description="Height after EXIF orientation")
