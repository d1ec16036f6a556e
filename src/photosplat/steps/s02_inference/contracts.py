"""I/O contracts for Step 02: Model inference."""

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from photosplat.core.contracts import GaussianSet


class InferenceInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tensor: np.ndarray = Field(..., description="Preprocessed (3, H, W) float32 image")
    focal_length_px: float = Field(..., gt=0, description="Focal length in original-image pixels")
    original_width: int = Field(..., gt=0, description="Original (oriented) image width")


class InferenceOutput(BaseModel):
    gaussians: GaussianSet = Field(..., description="Camera-space (NDC) Gaussians")
