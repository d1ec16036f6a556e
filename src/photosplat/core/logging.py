"""Structured logging setup for photosplat."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Third-party loggers that flood DEBUG output (PNG chunk traces, EXIF parsing).
_NOISY_LOGGERS = ("PIL",)


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure structured logging with consistent format.

    With ``log_file`` set, records also go to that file.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
