"""Configuration for Step 04: PLY export."""

from pydantic import BaseModel, Field

from photosplat.utils.io import DEFAULT_CHUNK_BYTES


class ExportPlyConfig(BaseModel):
    output_subdir: str = Field("splats", description="Directory under data_root receiving .ply files")
    chunk_bytes: int = Field(
        DEFAULT_CHUNK_BYTES, gt=0, description="Flush threshold for the streamed vertex buffer"
    )
