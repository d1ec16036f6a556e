"""Pipeline runner: reads pipeline.yaml and chains the four steps for one image."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel

from .contracts import PipelineConfig
from .errors import ModelNotLoaded
from .model import ModelHandle

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def load_step_config(config_path: Path, config_class: type[ConfigT]) -> ConfigT:
    """Load a step-specific YAML config into its Pydantic model."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return config_class(**raw)


def resolve_step_config(
    pipeline_cfg: PipelineConfig, step_name: str, config_class: type[ConfigT]
) -> ConfigT:
    """Step config from pipeline.yaml: an inline mapping, a path to a YAML file, or defaults."""
    entry = pipeline_cfg.steps.get(step_name)
    if entry is None:
        return config_class()
    if isinstance(entry, str):
        return load_step_config(Path(entry), config_class)
    return config_class(**entry)


def run_generation(
    image_path: Path,
    model: ModelHandle | None,
    pipeline_cfg: PipelineConfig,
):
    """Preprocess -> inference -> unproject -> export for a single photograph.

    Returns the ExportPlyOutput of the final step.
    """
    from photosplat.steps.s01_preprocess.config import PreprocessConfig
    from photosplat.steps.s01_preprocess.contracts import PreprocessInput
    from photosplat.steps.s01_preprocess.step import PreprocessStep
    from photosplat.steps.s02_inference.config import InferenceConfig
    from photosplat.steps.s02_inference.contracts import InferenceInput
    from photosplat.steps.s02_inference.step import InferenceStep
    from photosplat.steps.s03_unproject.config import UnprojectConfig
    from photosplat.steps.s03_unproject.contracts import UnprojectInput
    from photosplat.steps.s03_unproject.step import UnprojectStep
    from photosplat.steps.s04_export_ply.config import ExportPlyConfig
    from photosplat.steps.s04_export_ply.contracts import ExportPlyInput
    from photosplat.steps.s04_export_ply.step import ExportPlyStep

    if model is None:
        raise ModelNotLoaded()

    image_path = Path(image_path)
    data_root = pipeline_cfg.data_root
    target_width, target_height = model.io_spec.target_size()
    logger.info(f"--- Generating splat for {image_path.name} ({target_width}x{target_height} input) ---")

    preprocess = PreprocessStep(
        config=resolve_step_config(pipeline_cfg, "preprocess", PreprocessConfig),
        data_root=data_root,
    )
    pre_out = preprocess.execute(
        PreprocessInput(image_path=image_path, target_width=target_width, target_height=target_height)
    )

    inference = InferenceStep(
        config=resolve_step_config(pipeline_cfg, "inference", InferenceConfig),
        data_root=data_root,
        model=model,
    )
    inf_out = inference.execute(
        InferenceInput(
            tensor=pre_out.tensor,
            focal_length_px=pre_out.focal_length_px,
            original_width=pre_out.original_width,
        )
    )

    unproject = UnprojectStep(
        config=resolve_step_config(pipeline_cfg, "unproject", UnprojectConfig),
        data_root=data_root,
    )
    world = unproject.execute(
        UnprojectInput(
            gaussians=inf_out.gaussians,
            focal_length_px=pre_out.focal_length_px,
            original_width=pre_out.original_width,
            original_height=pre_out.original_height,
        )
    )

    export = ExportPlyStep(
        config=resolve_step_config(pipeline_cfg, "export_ply", ExportPlyConfig),
        data_root=data_root,
    )
    result = export.execute(ExportPlyInput(gaussians=world.gaussians, base_name=image_path.stem))
    logger.info(f"Generation complete: {result.ply_path}")
    return result
