"""Typed stage contract shared by the four generation steps.

A step is constructed from its pydantic config plus the data root, consumes
one input model and returns one output model. ``run_generation`` chains
preprocess -> inference -> unproject -> export_ply through ``execute``, and
``photosplat steps`` lists each step's config schema.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """One stage of a generation.

    Subclasses bind ``name`` plus the three model types and implement
    ``validate_inputs`` (cheap precondition check, returns False to reject)
    and ``run`` (the work itself; raises a GeneratorError on failure).
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT: ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool: ...

    def execute(self, inputs: InputT) -> OutputT:
        """validate_inputs, then run, logging wall time."""
        label = self.name or type(self).__name__
        if not self.validate_inputs(inputs):
            raise ValueError(f"[{label}] Input validation failed")

        logger.debug(f"[{label}] Starting")
        started = time.perf_counter()
        result = self.run(inputs)
        logger.info(f"[{label}] Done in {time.perf_counter() - started:.3f}s")
        return result

    @classmethod
    def get_config_schema(cls) -> dict:
        """JSON schema of the step's config model."""
        return cls.config_type.model_json_schema()
