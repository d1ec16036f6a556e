"""SplatGenerator: owns the model handle and reports generation progress.

State machine::

    idle -> loading_model -> processing -> complete(path) | error(message)
    complete / error -> idle        (acknowledge())

The model is loaded at most once per generator; later generations go straight
to ``processing``. Work runs on a single dedicated worker thread and results
are delivered through a ``concurrent.futures.Future``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Callable

from pydantic import BaseModel

from .contracts import PipelineConfig
from .errors import GeneratorBusy, ModelNotLoaded
from .model import ModelHandle, load_model
from .pipeline_runner import run_generation

logger = logging.getLogger(__name__)


class GeneratorState(str, Enum):
    IDLE = "idle"
    LOADING_MODEL = "loading_model"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


class GeneratorStatus(BaseModel):
    """Snapshot delivered to listeners on every transition."""

    state: GeneratorState = GeneratorState.IDLE
    output_path: Path | None = None
    message: str | None = None


StatusListener = Callable[[GeneratorStatus], None]

_BUSY_STATES = (GeneratorState.LOADING_MODEL, GeneratorState.PROCESSING)


class SplatGenerator:
    def __init__(
        self,
        config: PipelineConfig,
        model_loader: Callable[[], ModelHandle] | None = None,
    ):
        self.config = config
        self._model_loader = model_loader or (lambda: load_model(config.model))
        self._model: ModelHandle | None = None
        self._load_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._status = GeneratorStatus()
        self._listeners: list[StatusListener] = []
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="photosplat")

    # ── state ────────────────────────────────────────────────────────

    @property
    def status(self) -> GeneratorStatus:
        with self._state_lock:
            return self._status.model_copy()

    @property
    def state(self) -> GeneratorState:
        return self.status.state

    @property
    def is_model_loaded(self) -> bool:
        return self._model is not None

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def _transition(self, state: GeneratorState, **fields) -> None:
        with self._state_lock:
            self._status = GeneratorStatus(state=state, **fields)
            snapshot = self._status.model_copy()
        logger.info(f"Generator state -> {state.value}" + (f" ({snapshot.message})" if snapshot.message else ""))
        for listener in list(self._listeners):
            # A failing listener must not change the generation's outcome.
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Status listener {listener!r} failed on {state.value}")

    def acknowledge(self) -> None:
        """Return from ``complete`` / ``error`` to ``idle``."""
        with self._state_lock:
            current = self._status.state
        if current in (GeneratorState.COMPLETE, GeneratorState.ERROR):
            self._transition(GeneratorState.IDLE)

    # ── model ────────────────────────────────────────────────────────

    def load_model_if_needed(self) -> ModelHandle:
        """Idempotent load-or-get; concurrent callers wait for a single load."""
        if self._model is not None:
            return self._model
        with self._load_lock:
            if self._model is None:
                previous = self.status
                in_generation = previous.state == GeneratorState.PROCESSING
                self._transition(GeneratorState.LOADING_MODEL)
                try:
                    model = self._model_loader()
                    # Surface a model without a usable image input at load time.
                    model.io_spec.target_size()
                except Exception as e:
                    if not in_generation:
                        self._transition(GeneratorState.ERROR, message=str(e))
                    raise
                self._model = model
                if not in_generation:
                    self._transition(
                        previous.state, output_path=previous.output_path, message=previous.message
                    )
        return self._model

    @property
    def model(self) -> ModelHandle:
        if self._model is None:
            raise ModelNotLoaded()
        return self._model

    # ── generation ───────────────────────────────────────────────────

    def _claim(self) -> None:
        with self._state_lock:
            if self._status.state in _BUSY_STATES:
                raise GeneratorBusy()
            # Claim before leaving the lock so a racing request sees us busy.
            self._status = GeneratorStatus(state=GeneratorState.PROCESSING)

    def _run(self, image_path: Path) -> Path:
        try:
            model = self.load_model_if_needed()
            self._transition(GeneratorState.PROCESSING)
            result = run_generation(Path(image_path), model, self.config)
        except Exception as e:
            logger.error(f"Generation failed for {image_path}: {e}")
            self._transition(GeneratorState.ERROR, message=str(e))
            raise
        self._transition(GeneratorState.COMPLETE, output_path=result.ply_path)
        return result.ply_path

    def generate(self, image_path: Path) -> Path:
        """Blocking generation on the calling thread."""
        self._claim()
        return self._run(image_path)

    def submit(self, image_path: Path) -> Future[Path]:
        """Run a generation on the worker thread; the future carries the PLY path."""
        self._claim()
        return self._executor.submit(self._run, image_path)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> SplatGenerator:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
