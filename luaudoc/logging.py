"""Logging utilities for luaudoc commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .models import Diagnostic

_LOGGER_NAME = "luaudoc"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the luaudoc hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the luaudoc logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[luaudoc] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def log_diagnostics(logger: logging.Logger, diagnostics: Iterable[Diagnostic]) -> int:
    """Emit each diagnostic at its own level and return how many were logged."""
    count = 0
    for diagnostic in diagnostics:
        level = logging.ERROR if diagnostic.level == "error" else logging.WARNING
        logger.log(level, "%s", diagnostic.format())
        count += 1
    return count


__all__ = ["configure_logging", "get_logger", "log_diagnostics"]
