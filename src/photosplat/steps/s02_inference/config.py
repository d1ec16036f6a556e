"""Configuration for Step 02: Model inference."""

from pydantic import BaseModel, Field


class InferenceConfig(BaseModel):
    log_output_stats: bool = Field(True, description="Log min/max of each output array")
