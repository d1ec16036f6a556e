"""Error taxonomy for the generation pipeline.

Every error is terminal for the current generation attempt. The message of
each exception is what the orchestrator surfaces in its ``error`` state.
"""

from __future__ import annotations


class GeneratorError(RuntimeError):
    """Base class for all generation failures."""

    default_message = "Generation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ModelNotFound(GeneratorError):
    default_message = "Model not found"


class ModelNotLoaded(GeneratorError):
    default_message = "Model not loaded"


class ImageLoadFailed(GeneratorError):
    default_message = "Failed to load image"


class ImageProcessingFailed(GeneratorError):
    default_message = "Failed to process image"


class ModelIncompatible(GeneratorError):
    """The loaded model's declared tensors do not match what we feed it."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Model incompatible: {reason}")


class InferenceOutputMissing(GeneratorError):
    def __init__(self, name: str | None = None):
        self.output_name = name
        if name:
            super().__init__(f"Inference output missing: {name}")
        else:
            super().__init__("Inference output missing")


class PlyWriteError(GeneratorError):
    default_message = "Failed to write PLY file"


class GeneratorBusy(GeneratorError):
    default_message = "A generation is already in progress"
