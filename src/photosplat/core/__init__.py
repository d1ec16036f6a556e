"""photosplat core: contracts, errors, model handles, runner, generator."""

from .step_base import BaseStep
from .contracts import GaussianSet, ModelConfig, ModelIOSpec, PipelineConfig, TensorSpec
from .errors import (
    GeneratorBusy,
    GeneratorError,
    ImageLoadFailed,
    ImageProcessingFailed,
    InferenceOutputMissing,
    ModelIncompatible,
    ModelNotFound,
    ModelNotLoaded,
    PlyWriteError,
)
from .model import MockModel, OnnxModel, load_model
from .pipeline_runner import run_generation, load_pipeline_config
from .generator import GeneratorState, GeneratorStatus, SplatGenerator
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "GaussianSet",
    "ModelConfig",
    "ModelIOSpec",
    "PipelineConfig",
    "TensorSpec",
    "GeneratorBusy",
    "GeneratorError",
    "ImageLoadFailed",
    "ImageProcessingFailed",
    "InferenceOutputMissing",
    "ModelIncompatible",
    "ModelNotFound",
    "ModelNotLoaded",
    "PlyWriteError",
    "MockModel",
    "OnnxModel",
    "load_model",
    "run_generation",
    "load_pipeline_config",
    "GeneratorState",
    "GeneratorStatus",
    "SplatGenerator",
    "setup_logging",
]
