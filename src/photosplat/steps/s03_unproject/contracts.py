"""I/O contracts for Step 03: Camera-to-world unprojection."""

from pydantic import BaseModel, Field

from photosplat.core.contracts import GaussianSet


class UnprojectInput(BaseModel):
    gaussians: GaussianSet = Field(..., description="Camera-space Gaussians from the model")
    focal_length_px: float = Field(..., description="Focal length in original-image pixels")
    original_width: int = Field(..., gt=0, description="Original (oriented) image width")
    original_height: int = Field(..., gt=0, description="Original (oriented) image height")


class UnprojectOutput(BaseModel):
    gaussians: GaussianSet = Field(..., description="World-space Gaussians")
