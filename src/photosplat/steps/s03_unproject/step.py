"""Step 03: Map camera-space Gaussians into world space."""

from __future__ import annotations

import logging
from typing import ClassVar

from photosplat.core.contracts import GaussianSet
from photosplat.core.step_base import BaseStep
from photosplat.utils.geometry import unprojection_axes, unproject_means, unproject_scales
from .config import UnprojectConfig
from .contracts import UnprojectInput, UnprojectOutput

logger = logging.getLogger(__name__)


def unproject(
    gaussians: GaussianSet,
    focal_length_px: float,
    original_width: int,
    original_height: int,
    anisotropic_scales: bool = True,
) -> GaussianSet:
    """Pure unprojection; z, rotations, colors and opacities pass through."""
    axes = unprojection_axes(focal_length_px, original_width, original_height)
    if anisotropic_scales:
        scales = unproject_scales(gaussians.scales, gaussians.quaternions, axes)
    else:
        scales = unproject_means(gaussians.scales, axes)
    return GaussianSet(
        means=unproject_means(gaussians.means, axes),
        scales=scales,
        quaternions=gaussians.quaternions.copy(),
        colors=gaussians.colors.copy(),
        opacities=gaussians.opacities.copy(),
    )


class UnprojectStep(BaseStep[UnprojectInput, UnprojectOutput, UnprojectConfig]):
    name: ClassVar[str] = "unproject"
    input_type: ClassVar = UnprojectInput
    output_type: ClassVar = UnprojectOutput
    config_type: ClassVar = UnprojectConfig

    def validate_inputs(self, inputs: UnprojectInput) -> bool:
        # Degenerate focal lengths are clamped, never rejected.
        return True

    def run(self, inputs: UnprojectInput) -> UnprojectOutput:
        world = unproject(
            inputs.gaussians,
            inputs.focal_length_px,
            inputs.original_width,
            inputs.original_height,
            anisotropic_scales=self.config.anisotropic_scales,
        )
        logger.info(f"Unprojected {world.num_points} Gaussians")
        return UnprojectOutput(gaussians=world)
