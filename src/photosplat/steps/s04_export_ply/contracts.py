"""I/O contracts for Step 04: PLY export."""

from pathlib import Path

from pydantic import BaseModel, Field

from photosplat.core.contracts import GaussianSet


class ExportPlyInput(BaseModel):
    gaussians: GaussianSet = Field(..., description="World-space Gaussians")
    base_name: str = Field(..., min_length=1, description="Output file stem, usually the image stem")


class ExportPlyOutput(BaseModel):
    ply_path: Path = Field(..., description="Path of the written .ply")
    num_gaussians: int = Field(..., description="Number of vertex records written")
    num_bytes: int = Field(..., description="Total file size in bytes")
