"""Configuration for Step 03: Camera-to-world unprojection."""

from pydantic import BaseModel, Field


class UnprojectConfig(BaseModel):
    anisotropic_scales: bool = Field(
        True,
        description="Rotate scales through the covariance (False = naive per-axis multiply)",
    )
