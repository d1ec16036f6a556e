"""Step 04: Stream world-space Gaussians to a binary PLY."""

from __future__ import annotations

import logging
from typing import ClassVar

from photosplat.core.errors import PlyWriteError
from photosplat.core.step_base import BaseStep
from photosplat.utils.io import write_gaussian_ply
from .config import ExportPlyConfig
from .contracts import ExportPlyInput, ExportPlyOutput

logger = logging.getLogger(__name__)


class ExportPlyStep(BaseStep[ExportPlyInput, ExportPlyOutput, ExportPlyConfig]):
    """Write ``<base>.ply`` (or ``<base>_<n>.ply``) without overwriting anything."""

    name: ClassVar[str] = "export_ply"
    input_type: ClassVar = ExportPlyInput
    output_type: ClassVar = ExportPlyOutput
    config_type: ClassVar = ExportPlyConfig

    def validate_inputs(self, inputs: ExportPlyInput) -> bool:
        if "/" in inputs.base_name or "\\" in inputs.base_name:
            logger.error(f"Base name must not contain path separators: {inputs.base_name!r}")
            return False
        return True

    def run(self, inputs: ExportPlyInput) -> ExportPlyOutput:
        output_dir = self.data_root / self.config.output_subdir
        g = inputs.gaussians
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            ply_path, num_bytes = write_gaussian_ply(
                output_dir,
                inputs.base_name,
                g.means,
                g.scales,
                g.quaternions,
                g.colors,
                g.opacities,
                chunk_bytes=self.config.chunk_bytes,
            )
        except OSError as e:
            raise PlyWriteError(f"Failed to write PLY file: {e}") from e

        return ExportPlyOutput(ply_path=ply_path, num_gaussians=g.num_points, num_bytes=num_bytes)
