"""Step 02: Run the image -> Gaussian-parameters model."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

import numpy as np

from photosplat.core.model import ModelHandle
from photosplat.core.step_base import BaseStep
from ._marshal import build_feeds, extract_gaussians
from .config import InferenceConfig
from .contracts import InferenceInput, InferenceOutput

logger = logging.getLogger(__name__)


class InferenceStep(BaseStep[InferenceInput, InferenceOutput, InferenceConfig]):
    """Marshal the preprocessed image into the model's declared tensors, predict,
    and collect the five per-point output arrays.
    """

    name: ClassVar[str] = "inference"
    input_type: ClassVar = InferenceInput
    output_type: ClassVar = InferenceOutput
    config_type: ClassVar = InferenceConfig

    def __init__(self, config: InferenceConfig, data_root: Path, model: ModelHandle):
        super().__init__(config, data_root)
        self.model = model

    def validate_inputs(self, inputs: InferenceInput) -> bool:
        if inputs.tensor.size == 0:
            logger.error("Preprocessed tensor is empty")
            return False
        if not np.isfinite(inputs.focal_length_px):
            logger.error(f"Non-finite focal length: {inputs.focal_length_px}")
            return False
        return True

    def run(self, inputs: InferenceInput) -> InferenceOutput:
        feeds = build_feeds(
            self.model.io_spec, inputs.tensor, inputs.focal_length_px, inputs.original_width
        )
        logger.info(
            f"Feeding image {feeds['image'].shape} {feeds['image'].dtype}, "
            f"disparity_factor={inputs.focal_length_px / inputs.original_width:.4f}"
        )

        outputs = self.model.predict(feeds)
        gaussians = extract_gaussians(outputs)

        if self.config.log_output_stats:
            for field in ("means", "scales", "opacities"):
                arr = getattr(gaussians, field)
                if arr.size:
                    logger.debug(f"{field}: min={arr.min():.4g} max={arr.max():.4g}")
        logger.info(f"Model produced {gaussians.num_points} Gaussians")
        return InferenceOutput(gaussians=gaussians)
