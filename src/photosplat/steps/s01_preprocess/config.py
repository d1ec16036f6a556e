"""Configuration for Step 01: Image preprocessing."""

from pydantic import BaseModel, Field


class PreprocessConfig(BaseModel):
    default_focal_mm: float = Field(
        30.0, gt=0, description="Focal length (mm) assumed when EXIF carries none"
    )
    small_focal_threshold_mm: float = Field(
        10.0, description="Raw focal lengths below this are treated as small-sensor lenses"
    )
    crop_factor: float = Field(
        8.4, gt=0, description="Multiplier converting small-sensor focal length to 35mm equivalent"
    )
    apply_exif_orientation: bool = Field(True, description="Rotate/mirror pixels per EXIF orientation tag")
